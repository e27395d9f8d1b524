# --------------------------------------------------------------
# File: file_message.py
# Description: Descriptor de mensajes de archivo y su serialización compacta.
# --------------------------------------------------------------
"""Mensaje de archivo que viaja cifrado dentro de un mensaje de tipo FILE.

Campos de wire (JSON compacto con claves de una letra):

    b  id del blob del archivo          t  id del blob de la miniatura
    m  tipo MIME del archivo            p  tipo MIME de la miniatura
    k  clave simétrica (64 hex)         n  nombre del archivo
    s  tamaño en bytes                  d  descripción
    j  tipo de renderizado              i  indicador heredado (0 ó 1)
    x  metadatos {a, h, w, d}
"""

from __future__ import annotations

import json
import re
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from gateway_core.crypto_sym import SymmetricKey
from gateway_core.errors import InvalidFileMessage, ParseError
from gateway_core.types import BlobId, RenderingType, hex_to_bytes

MAX_U32 = 0xFFFFFFFF
KEY_SIZE = 32

_TOKEN = r"[A-Za-z0-9!#$&^_.+-]+"
MEDIA_TYPE = re.compile(rf"{_TOKEN}/{_TOKEN}(\s*;.*)?")


class FileMetadata(BaseModel):
    """Pistas de renderizado para archivos multimedia y stickers.

    Attributes:
        animated (Optional[bool]): Si la imagen es animada.
        height (Optional[int]): Alto en píxeles.
        width (Optional[int]): Ancho en píxeles.
        duration_seconds (Optional[float]): Duración del audio o vídeo.

    """

    model_config = ConfigDict(frozen=True)

    animated: Optional[bool] = None
    height: Optional[int] = Field(default=None, ge=0)
    width: Optional[int] = Field(default=None, ge=0)
    duration_seconds: Optional[float] = Field(default=None, ge=0)

    def to_wire(self) -> Dict[str, Any]:
        wire: Dict[str, Any] = {}
        if self.animated is not None:
            wire["a"] = self.animated
        if self.height is not None:
            wire["h"] = self.height
        if self.width is not None:
            wire["w"] = self.width
        if self.duration_seconds is not None:
            wire["d"] = self.duration_seconds
        return wire


class FileMessage(BaseModel):
    """Descriptor de un archivo subido al servidor de blobs.

    Usa :func:`new_file_message` para construirlo con errores
    :class:`InvalidFileMessage` en lugar de ``ValidationError``.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    file_blob_id: BlobId
    media_type: str
    blob_encryption_key: bytes
    file_size_bytes: int = Field(ge=0, le=MAX_U32)
    thumbnail_blob_id: Optional[BlobId] = None
    thumbnail_media_type: Optional[str] = None
    file_name: Optional[str] = None
    description: Optional[str] = None
    rendering_type: RenderingType = RenderingType.FILE
    metadata: Optional[FileMetadata] = None

    @field_validator("file_blob_id", "thumbnail_blob_id", mode="before")
    @classmethod
    def _parse_blob_id(cls, value: Any) -> Any:
        if isinstance(value, str):
            return BlobId.from_str(value)
        return value

    @field_validator("blob_encryption_key", mode="before")
    @classmethod
    def _parse_key(cls, value: Union[SymmetricKey, bytes, str]) -> bytes:
        if isinstance(value, SymmetricKey):
            return value.as_bytes()
        if isinstance(value, str):
            return hex_to_bytes(value, KEY_SIZE)
        if isinstance(value, (bytes, bytearray)) and len(value) == KEY_SIZE:
            return bytes(value)
        raise ValueError(f"La clave del blob debe tener {KEY_SIZE} bytes")

    @field_validator("media_type", "thumbnail_media_type")
    @classmethod
    def _check_media_type(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not MEDIA_TYPE.fullmatch(value):
            raise ValueError(f"Tipo MIME inválido: {value!r}")
        return value

    @model_validator(mode="after")
    def _check_combinations(self) -> "FileMessage":
        if (self.thumbnail_blob_id is None) != (self.thumbnail_media_type is None):
            raise ValueError("La miniatura necesita id de blob y tipo MIME a la vez")
        if self.metadata is not None:
            if self.rendering_type is RenderingType.FILE:
                raise ValueError("Los metadatos solo se admiten en Media o Sticker")
            if (
                self.rendering_type is RenderingType.STICKER
                and self.metadata.duration_seconds is not None
            ):
                raise ValueError("Un sticker no puede tener duración")
        return self

    @property
    def legacy_flag(self) -> int:
        return self.rendering_type.legacy_flag

    def to_wire_dict(self) -> Dict[str, Any]:
        """Construye el diccionario con claves de una letra."""

        wire: Dict[str, Any] = {
            "b": str(self.file_blob_id),
            "m": self.media_type,
            "k": self.blob_encryption_key.hex(),
            "s": self.file_size_bytes,
            "j": int(self.rendering_type),
            "i": self.legacy_flag,
        }
        if self.thumbnail_blob_id is not None:
            wire["t"] = str(self.thumbnail_blob_id)
            wire["p"] = self.thumbnail_media_type
        if self.file_name is not None:
            wire["n"] = self.file_name
        if self.description is not None:
            wire["d"] = self.description
        if self.metadata is not None:
            metadata = self.metadata.to_wire()
            if metadata:
                wire["x"] = metadata
        return wire

    def to_json_bytes(self) -> bytes:
        """Serializa el descriptor a JSON compacto en UTF-8."""

        return json.dumps(
            self.to_wire_dict(), separators=(",", ":"), sort_keys=True, ensure_ascii=False
        ).encode("utf-8")

    @classmethod
    def from_json(cls, data: Union[bytes, str]) -> "FileMessage":
        """Interpreta la carga útil de un mensaje de archivo recibido.

        Args:
            data (Union[bytes, str]): JSON compacto descifrado.

        Returns:
            FileMessage: Descriptor validado.

        Raises:
            ParseError: Si el JSON o alguno de sus campos no es válido.

        """

        try:
            wire = json.loads(data)
            rendering_type = RenderingType(wire.get("j", 0))
            metadata = None
            extra = wire.get("x")
            if extra and rendering_type is not RenderingType.FILE:
                metadata = FileMetadata(
                    animated=extra.get("a"),
                    height=extra.get("h"),
                    width=extra.get("w"),
                    duration_seconds=extra.get("d"),
                )
            return cls(
                file_blob_id=wire["b"],
                media_type=wire["m"],
                blob_encryption_key=wire["k"],
                file_size_bytes=wire["s"],
                thumbnail_blob_id=wire.get("t"),
                thumbnail_media_type=wire.get("p"),
                file_name=wire.get("n"),
                description=wire.get("d"),
                rendering_type=rendering_type,
                metadata=metadata,
            )
        except (KeyError, TypeError, AttributeError, ValueError) as exc:
            raise ParseError("Mensaje de archivo mal formado") from exc


def new_file_message(**fields: Any) -> FileMessage:
    """Crea un :class:`FileMessage` validando todas las reglas de combinación.

    Args:
        **fields (Any): Campos de :class:`FileMessage` por nombre.

    Returns:
        FileMessage: Descriptor listo para cifrar.

    Raises:
        InvalidFileMessage: Si algún campo o combinación no es válida.

    """

    try:
        return FileMessage(**fields)
    except ValidationError as exc:
        reasons = "; ".join(error["msg"] for error in exc.errors())
        raise InvalidFileMessage(reasons) from exc
