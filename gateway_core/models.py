# --------------------------------------------------------------
# File: models.py
# Description: Modelos de datos comunes utilizados por la capa criptográfica.
# --------------------------------------------------------------
"""Modelos Pydantic que encapsulan estructuras de intercambio criptográfico."""

from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, field_validator

NONCE_SIZE = 24


class EncryptedMessage(BaseModel):
    """Representa el resultado de cifrar un mensaje para un destinatario.

    Attributes:
        ciphertext (bytes): Caja cifrada y autenticada.
        nonce (bytes): Nonce aleatorio de 24 bytes usado en el cifrado.

    """

    model_config = ConfigDict(frozen=True)

    ciphertext: bytes
    nonce: bytes

    @field_validator("nonce")
    @classmethod
    def _check_nonce(cls, value: bytes) -> bytes:
        if len(value) != NONCE_SIZE:
            raise ValueError(f"El nonce debe tener {NONCE_SIZE} bytes")
        return value

    def as_form_fields(self) -> Dict[str, str]:
        """Devuelve los campos ``nonce`` y ``box`` tal y como los espera el gateway.

        Returns:
            Dict[str, str]: Nonce y ciphertext codificados en hex minúscula.

        """

        return {"nonce": self.nonce.hex(), "box": self.ciphertext.hex()}


class EncryptedFileData(BaseModel):
    """Archivo y miniatura opcional cifrados con la misma clave simétrica.

    Attributes:
        file (bytes): Archivo cifrado, sin nonce.
        thumbnail (Optional[bytes]): Miniatura cifrada, si existe.

    """

    model_config = ConfigDict(frozen=True)

    file: bytes
    thumbnail: Optional[bytes] = None


class FileData(BaseModel):
    """Archivo y miniatura opcional en claro."""

    model_config = ConfigDict(frozen=True)

    file: bytes
    thumbnail: Optional[bytes] = None
