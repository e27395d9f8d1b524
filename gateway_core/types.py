# --------------------------------------------------------------
# File: types.py
# Description: Tipos de mensaje, tipos de renderizado e identificadores de blob.
# --------------------------------------------------------------
"""Tipos compartidos por el codificador de mensajes y el validador entrante."""

from __future__ import annotations

import re
from enum import IntEnum
from typing import Optional

from gateway_core.errors import ParseError

_HEX = re.compile(r"[0-9a-fA-F]*")

BLOB_ID_SIZE = 16


def hex_to_bytes(value: str, length: Optional[int] = None) -> bytes:
    """Decodifica una cadena hexadecimal de forma estricta.

    A diferencia de ``bytes.fromhex`` no admite espacios ni saltos de línea.

    Args:
        value (str): Texto hexadecimal en mayúsculas o minúsculas.
        length (Optional[int]): Longitud exacta esperada en bytes.

    Returns:
        bytes: Bytes decodificados.

    Raises:
        ParseError: Si el texto no es hex válido o la longitud no coincide.

    """

    if not isinstance(value, str) or not _HEX.fullmatch(value) or len(value) % 2:
        raise ParseError("Cadena hexadecimal inválida")
    raw = bytes.fromhex(value)
    if length is not None and len(raw) != length:
        raise ParseError(f"Se esperaban {length} bytes, hay {len(raw)}")
    return raw


class MessageType(IntEnum):
    """Byte de tipo que precede a la carga útil en el texto plano con relleno."""

    TEXT = 0x01
    IMAGE = 0x02
    VIDEO = 0x13
    FILE = 0x17
    DELIVERY_RECEIPT = 0x80


class RenderingType(IntEnum):
    """Indica cómo muestra el destinatario un mensaje de archivo."""

    FILE = 0
    MEDIA = 1
    STICKER = 2

    @property
    def legacy_flag(self) -> int:
        # Los clientes antiguos solo distinguen archivo normal de multimedia.
        return 0 if self is RenderingType.FILE else 1


class DeliveryReceiptStatus(IntEnum):
    RECEIVED = 0x01
    READ = 0x02
    USER_ACK = 0x03
    USER_DEC = 0x04


class BlobId:
    """Identificador de 16 bytes de un blob cifrado en el servidor de blobs."""

    __slots__ = ("_raw",)

    def __init__(self, raw: bytes) -> None:
        if not isinstance(raw, (bytes, bytearray)) or len(raw) != BLOB_ID_SIZE:
            raise ParseError(f"Un BlobId debe tener {BLOB_ID_SIZE} bytes")
        self._raw = bytes(raw)

    @classmethod
    def from_str(cls, value: str) -> "BlobId":
        """Crea un BlobId a partir de 32 caracteres hexadecimales.

        Args:
            value (str): Forma textual del identificador.

        Returns:
            BlobId: Identificador decodificado.

        """

        return cls(hex_to_bytes(value, BLOB_ID_SIZE))

    def as_bytes(self) -> bytes:
        return self._raw

    def __bytes__(self) -> bytes:
        return self._raw

    def __str__(self) -> str:
        return self._raw.hex()

    def __repr__(self) -> str:
        return f"BlobId('{self._raw.hex()}')"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BlobId):
            return NotImplemented
        return self._raw == other._raw

    def __hash__(self) -> int:
        return hash(self._raw)
