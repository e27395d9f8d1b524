# --------------------------------------------------------------
# File: test_file_message.py
# Description: Pruebas del descriptor de mensajes de archivo y su formato de wire.
# --------------------------------------------------------------

import json

import pytest

from gateway_core.crypto_sym import SymmetricKey
from gateway_core.errors import InvalidFileMessage, ParseError
from gateway_core.file_message import FileMessage, FileMetadata, new_file_message
from gateway_core.types import BlobId, RenderingType

KEY = bytes([1, 2, 3, 4] * 8)
KEY_HEX = "01020304" * 8


def _wire(msg: FileMessage) -> dict:
    """Decodifica el JSON compacto de un mensaje de archivo."""
    return json.loads(msg.to_json_bytes())


def test_serialize_minimal():
    """Un mensaje mínimo solo contiene las seis claves obligatorias."""
    msg = new_file_message(
        file_blob_id=BlobId.from_str("0123456789abcdef0123456789abcdef"),
        media_type="application/pdf",
        blob_encryption_key=KEY,
        file_size_bytes=2048,
    )
    assert _wire(msg) == {
        "b": "0123456789abcdef0123456789abcdef",
        "k": KEY_HEX,
        "m": "application/pdf",
        "s": 2048,
        "j": 0,
        "i": 0,
    }


def test_serialize_full():
    """Un sticker con miniatura y metadatos incluye todas las claves."""
    msg = new_file_message(
        file_blob_id="0123456789abcdef0123456789abcdef",
        thumbnail_blob_id="abcdef0123456789abcdef0123456789",
        thumbnail_media_type="image/png",
        media_type="image/png",
        blob_encryption_key=SymmetricKey(KEY),
        file_name="sticker.png",
        file_size_bytes=2048,
        description="This is a fancy sticker",
        rendering_type=RenderingType.STICKER,
        metadata=FileMetadata(animated=False, height=512, width=256),
    )
    wire = _wire(msg)
    assert len(wire) == 11
    assert wire["t"] == "abcdef0123456789abcdef0123456789"
    assert wire["p"] == "image/png"
    assert wire["k"] == KEY_HEX
    assert wire["n"] == "sticker.png"
    assert wire["d"] == "This is a fancy sticker"
    assert wire["j"] == 2
    assert wire["i"] == 1
    assert wire["x"] == {"a": False, "h": 512, "w": 256}


def test_media_duration_is_float():
    """La duración se serializa como número en coma flotante."""
    msg = new_file_message(
        file_blob_id="0123456789abcdef0123456789abcdef",
        media_type="audio/aac",
        blob_encryption_key=KEY_HEX,
        file_size_bytes=10,
        rendering_type=RenderingType.MEDIA,
        metadata=FileMetadata(duration_seconds=12.5),
    )
    assert _wire(msg)["x"] == {"d": 12.5}
    assert msg.legacy_flag == 1


def test_json_is_compact():
    """El JSON no contiene espacios entre separadores."""
    msg = new_file_message(
        file_blob_id="0123456789abcdef0123456789abcdef",
        media_type="text/plain",
        blob_encryption_key=KEY,
        file_size_bytes=1,
        file_name="ñandú.txt",
    )
    raw = msg.to_json_bytes()
    assert b", " not in raw and b": " not in raw
    assert "ñandú.txt".encode("utf-8") in raw


@pytest.mark.parametrize(
    "extra",
    [
        {"rendering_type": RenderingType.STICKER, "metadata": FileMetadata(duration_seconds=3.0)},
        {"rendering_type": RenderingType.FILE, "metadata": FileMetadata(height=10)},
        {"thumbnail_blob_id": "abcdef0123456789abcdef0123456789"},
        {"thumbnail_media_type": "image/jpeg"},
        {"media_type": "pdf"},
        {"file_size_bytes": -1},
        {"file_size_bytes": 2**32},
        {"blob_encryption_key": b"\x00" * 31},
        {"file_blob_id": "0123456789abcdef0123456789abcde"},
    ],
)
def test_invalid_combinations_are_rejected(extra):
    """Las combinaciones no permitidas producen InvalidFileMessage.

    Args:
        extra (dict): Campos que sustituyen a los de un mensaje válido.
    """
    fields = {
        "file_blob_id": "0123456789abcdef0123456789abcdef",
        "media_type": "application/pdf",
        "blob_encryption_key": KEY,
        "file_size_bytes": 2048,
    }
    fields.update(extra)
    with pytest.raises(InvalidFileMessage):
        new_file_message(**fields)


def test_from_json_roundtrip():
    """Un mensaje recibido se interpreta igual que el que se envió."""
    msg = new_file_message(
        file_blob_id="0123456789abcdef0123456789abcdef",
        thumbnail_blob_id="abcdef0123456789abcdef0123456789",
        thumbnail_media_type="image/jpeg",
        media_type="video/mp4",
        blob_encryption_key=KEY,
        file_size_bytes=99,
        rendering_type=RenderingType.MEDIA,
        metadata=FileMetadata(height=720, width=1280, duration_seconds=4.0),
    )
    parsed = FileMessage.from_json(msg.to_json_bytes())
    assert parsed == msg


@pytest.mark.parametrize("payload", [b"{not json", b"[]", b'{"b": "00"}', b"\xff"])
def test_from_json_rejects_malformed(payload):
    """Las cargas mal formadas producen ParseError.

    Args:
        payload (bytes): JSON inválido o incompleto.
    """
    with pytest.raises(ParseError):
        FileMessage.from_json(payload)
