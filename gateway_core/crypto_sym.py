# --------------------------------------------------------------
# File: crypto_sym.py
# Description: Cifrado simétrico (NaCl secretbox) de archivos y miniaturas.
# --------------------------------------------------------------
"""Rutinas de cifrado simétrico para los blobs de archivo y miniatura.

Los nonces son constantes. Solo es seguro porque cada llamada a
:func:`encrypt_file_data` genera una clave nueva que no se reutiliza nunca.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Optional, Tuple

import nacl.exceptions
import nacl.utils
from nacl.secret import SecretBox

from gateway_core.errors import BadKey, DecryptionFailed
from gateway_core.models import EncryptedFileData, FileData
from gateway_core.types import hex_to_bytes

logger = logging.getLogger(__name__)


@lru_cache(maxsize=None)
def file_nonce() -> bytes:
    """Nonce fijo reservado para el archivo: 23 ceros seguidos de ``0x01``."""

    return bytes(SecretBox.NONCE_SIZE - 1) + b"\x01"


@lru_cache(maxsize=None)
def thumbnail_nonce() -> bytes:
    """Nonce fijo reservado para la miniatura: 23 ceros seguidos de ``0x02``."""

    return bytes(SecretBox.NONCE_SIZE - 1) + b"\x02"


class SymmetricKey:
    """Clave simétrica de 32 bytes de un solo uso.

    El contenido se guarda en un buffer mutable que se pone a cero con
    :meth:`wipe`, al salir de un bloque ``with`` o al destruirse el objeto.
    """

    __slots__ = ("_buf",)

    def __init__(self, raw: bytes) -> None:
        if not isinstance(raw, (bytes, bytearray)) or len(raw) != SecretBox.KEY_SIZE:
            raise BadKey(f"La clave simétrica debe tener {SecretBox.KEY_SIZE} bytes")
        self._buf = bytearray(raw)

    @classmethod
    def generate(cls) -> "SymmetricKey":
        return cls(nacl.utils.random(SecretBox.KEY_SIZE))

    @classmethod
    def from_bytes(cls, raw: bytes) -> "SymmetricKey":
        return cls(raw)

    @classmethod
    def from_hex(cls, value: str) -> "SymmetricKey":
        try:
            return cls(hex_to_bytes(value, SecretBox.KEY_SIZE))
        except ValueError:
            raise BadKey("No se pudo decodificar la clave simétrica hex") from None

    def as_bytes(self) -> bytes:
        return bytes(self._buf)

    def hex(self) -> str:
        return self._buf.hex()

    def wipe(self) -> None:
        for i in range(len(self._buf)):
            self._buf[i] = 0

    def __enter__(self) -> "SymmetricKey":
        return self

    def __exit__(self, *exc_info) -> None:
        self.wipe()

    def __del__(self) -> None:
        if hasattr(self, "_buf"):
            self.wipe()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SymmetricKey):
            return NotImplemented
        return self._buf == other._buf

    __hash__ = None

    def __repr__(self) -> str:
        return "SymmetricKey(<oculta>)"


def encrypt_file_data(
    file_bytes: bytes, thumbnail_bytes: Optional[bytes] = None
) -> Tuple[EncryptedFileData, SymmetricKey]:
    """Cifra un archivo y su miniatura opcional con una clave nueva.

    Args:
        file_bytes (bytes): Contenido del archivo en claro.
        thumbnail_bytes (Optional[bytes]): Miniatura en claro, si existe.

    Returns:
        Tuple[EncryptedFileData, SymmetricKey]: Datos cifrados y la clave
        generada para esta llamada.

    """

    key = SymmetricKey.generate()
    box = SecretBox(key.as_bytes())
    encrypted_file = box.encrypt(bytes(file_bytes), file_nonce()).ciphertext
    encrypted_thumb = None
    if thumbnail_bytes is not None:
        encrypted_thumb = box.encrypt(bytes(thumbnail_bytes), thumbnail_nonce()).ciphertext
    logger.debug(
        "Archivo cifrado (%d bytes, miniatura=%s)",
        len(file_bytes),
        thumbnail_bytes is not None,
    )
    return EncryptedFileData(file=encrypted_file, thumbnail=encrypted_thumb), key


def decrypt_file_data(data: EncryptedFileData, key: SymmetricKey) -> FileData:
    """Descifra un archivo y su miniatura con la clave recibida.

    Args:
        data (EncryptedFileData): Archivo y miniatura cifrados.
        key (SymmetricKey): Clave transmitida en el mensaje de archivo.

    Returns:
        FileData: Archivo y miniatura en claro.

    Raises:
        DecryptionFailed: Si falla la autenticación del archivo o de la miniatura.

    """

    box = SecretBox(key.as_bytes())
    try:
        file_bytes = box.decrypt(data.file, file_nonce())
    except nacl.exceptions.CryptoError:
        raise DecryptionFailed("No se pudo descifrar el archivo") from None

    thumbnail = None
    if data.thumbnail is not None:
        try:
            thumbnail = box.decrypt(data.thumbnail, thumbnail_nonce())
        except nacl.exceptions.CryptoError:
            raise DecryptionFailed("No se pudo descifrar la miniatura") from None
    return FileData(file=file_bytes, thumbnail=thumbnail)
