# --------------------------------------------------------------
# File: crypto_box.py
# Description: Cifrado autenticado de clave pública (NaCl box) de mensajes.
# --------------------------------------------------------------
"""Cifrado y descifrado de mensajes extremo a extremo para un destinatario.

Se usa Curve25519-XSalsa20-Poly1305 (``crypto_box``) con un nonce aleatorio de
24 bytes distinto en cada llamada.
"""

from __future__ import annotations

import logging
import struct
from typing import TYPE_CHECKING, Iterable, Tuple, Type, Union

import nacl.exceptions
import nacl.utils
from nacl.public import Box, PrivateKey, PublicKey

from gateway_core.errors import (
    BadKey,
    BadNonce,
    DecryptionFailed,
    EncryptionFailed,
    GatewayCryptoError,
)
from gateway_core.models import NONCE_SIZE, EncryptedMessage
from gateway_core.padding import unwrap, wrap
from gateway_core.types import BlobId, DeliveryReceiptStatus, MessageType, hex_to_bytes

if TYPE_CHECKING:
    from gateway_core.file_message import FileMessage

logger = logging.getLogger(__name__)

KEY_SIZE = 32
MESSAGE_ID_SIZE = 8
MAX_U32 = 0xFFFFFFFF


class RecipientKey:
    """Clave pública Curve25519 de un destinatario, inmutable."""

    __slots__ = ("_raw",)

    def __init__(self, raw: bytes) -> None:
        if not isinstance(raw, (bytes, bytearray)) or len(raw) != KEY_SIZE:
            raise BadKey(f"La clave pública debe tener {KEY_SIZE} bytes")
        self._raw = bytes(raw)

    @classmethod
    def from_bytes(cls, raw: bytes) -> "RecipientKey":
        return cls(raw)

    @classmethod
    def from_hex(cls, value: str) -> "RecipientKey":
        """Crea la clave desde su representación hexadecimal.

        Args:
            value (str): 64 caracteres hex, mayúsculas o minúsculas.

        Returns:
            RecipientKey: Clave pública del destinatario.

        """

        try:
            raw = hex_to_bytes(value, KEY_SIZE)
        except ValueError:
            raise BadKey("No se pudo decodificar la clave pública hex") from None
        return cls(raw)

    @property
    def public_key(self) -> PublicKey:
        return PublicKey(self._raw)

    def as_bytes(self) -> bytes:
        return self._raw

    def __str__(self) -> str:
        return self._raw.hex()

    def __repr__(self) -> str:
        return f"RecipientKey('{self._raw.hex()}')"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RecipientKey):
            return NotImplemented
        return self._raw == other._raw

    def __hash__(self) -> int:
        return hash(self._raw)


PublicKeyLike = Union[RecipientKey, PublicKey, bytes]
PrivateKeyLike = Union[PrivateKey, bytes, str]


def load_private_key(value: PrivateKeyLike) -> PrivateKey:
    """Normaliza una clave privada en bytes, hex o ``PrivateKey``.

    Args:
        value (PrivateKeyLike): Clave privada de 32 bytes.

    Returns:
        PrivateKey: Clave privada de PyNaCl.

    Raises:
        BadKey: Si la clave no tiene el formato esperado.

    """

    if isinstance(value, PrivateKey):
        return value
    if isinstance(value, str):
        try:
            value = hex_to_bytes(value, KEY_SIZE)
        except ValueError:
            raise BadKey("No se pudo decodificar la clave privada hex") from None
    if not isinstance(value, (bytes, bytearray)) or len(value) != KEY_SIZE:
        raise BadKey("Clave privada libsodium inválida")
    return PrivateKey(bytes(value))


def _load_public_key(value: PublicKeyLike) -> PublicKey:
    if isinstance(value, PublicKey):
        return value
    if isinstance(value, RecipientKey):
        return value.public_key
    return RecipientKey(value).public_key


def _box(
    public_key: PublicKeyLike, private_key: PrivateKeyLike, error: Type[GatewayCryptoError]
) -> Box:
    # libsodium rechaza claves públicas de orden bajo al calcular el secreto compartido
    private = load_private_key(private_key)
    public = _load_public_key(public_key)
    try:
        return Box(private, public)
    except nacl.exceptions.CryptoError:
        raise error("No se pudo preparar la caja con estas claves") from None


def generate_keypair() -> Tuple[bytes, bytes]:
    """Genera un par de claves Curve25519 aleatorio.

    Returns:
        Tuple[bytes, bytes]: Clave privada y clave pública en bruto.

    """

    private_key = PrivateKey.generate()
    return bytes(private_key), bytes(private_key.public_key)


def encrypt_raw(
    data: bytes, public_key: PublicKeyLike, private_key: PrivateKeyLike
) -> EncryptedMessage:
    """Cifra datos para el destinatario sin añadir tipo ni relleno.

    Args:
        data (bytes): Datos ya preparados por el llamador.
        public_key (PublicKeyLike): Clave pública del destinatario.
        private_key (PrivateKeyLike): Clave privada propia.

    Returns:
        EncryptedMessage: Ciphertext y nonce aleatorio de 24 bytes.

    """

    box = _box(public_key, private_key, EncryptionFailed)
    nonce = nacl.utils.random(Box.NONCE_SIZE)
    try:
        sealed = box.encrypt(bytes(data), nonce)
    except nacl.exceptions.CryptoError:
        raise EncryptionFailed("No se pudo cifrar el mensaje") from None
    return EncryptedMessage(ciphertext=sealed.ciphertext, nonce=nonce)


def encrypt(
    data: bytes,
    msgtype: int,
    public_key: PublicKeyLike,
    private_key: PrivateKeyLike,
) -> EncryptedMessage:
    """Añade tipo y relleno aleatorio y cifra el resultado para el destinatario."""

    logger.debug("Cifrando mensaje tipo 0x%02x (%d bytes)", int(msgtype), len(data))
    return encrypt_raw(wrap(data, msgtype), public_key, private_key)


def decrypt(
    ciphertext: bytes,
    nonce: bytes,
    public_key: PublicKeyLike,
    private_key: PrivateKeyLike,
) -> bytes:
    """Abre una caja cifrada con la clave pública del remitente.

    Args:
        ciphertext (bytes): Caja cifrada.
        nonce (bytes): Nonce de 24 bytes usado al cifrar.
        public_key (PublicKeyLike): Clave pública del remitente.
        private_key (PrivateKeyLike): Clave privada propia.

    Returns:
        bytes: Texto plano completo, todavía con tipo y relleno.

    Raises:
        BadNonce: Si el nonce no tiene 24 bytes.
        DecryptionFailed: Si la autenticación falla.

    """

    if len(nonce) != NONCE_SIZE:
        raise BadNonce(f"El nonce debe tener {NONCE_SIZE} bytes")
    box = _box(public_key, private_key, DecryptionFailed)
    try:
        return box.decrypt(bytes(ciphertext), bytes(nonce))
    except nacl.exceptions.CryptoError:
        raise DecryptionFailed("No se pudo descifrar el mensaje") from None


def decrypt_message(
    ciphertext: bytes,
    nonce: bytes,
    public_key: PublicKeyLike,
    private_key: PrivateKeyLike,
) -> Tuple[int, bytes]:
    """Descifra y valida el relleno completo, devolviendo tipo y carga útil."""

    return unwrap(decrypt(ciphertext, nonce, public_key, private_key))


def encrypt_text_msg(
    text: str, public_key: PublicKeyLike, private_key: PrivateKeyLike
) -> EncryptedMessage:
    return encrypt(text.encode("utf-8"), MessageType.TEXT, public_key, private_key)


def encrypt_image_msg(
    blob_id: BlobId,
    img_size_bytes: int,
    image_data_nonce: bytes,
    public_key: PublicKeyLike,
    private_key: PrivateKeyLike,
) -> EncryptedMessage:
    """Cifra un mensaje de imagen que referencia un blob ya subido.

    La carga útil son 44 bytes: id del blob (16), tamaño en u32 little-endian
    (4) y nonce con el que se cifró el blob (24).

    Args:
        blob_id (BlobId): Identificador del blob con la imagen cifrada.
        img_size_bytes (int): Tamaño de la imagen en bytes.
        image_data_nonce (bytes): Nonce de 24 bytes del cifrado del blob.
        public_key (PublicKeyLike): Clave pública del destinatario.
        private_key (PrivateKeyLike): Clave privada propia.

    Returns:
        EncryptedMessage: Mensaje de tipo imagen cifrado.

    """

    if len(image_data_nonce) != NONCE_SIZE:
        raise BadNonce(f"El nonce de la imagen debe tener {NONCE_SIZE} bytes")
    if not 0 <= img_size_bytes <= MAX_U32:
        raise ValueError("El tamaño de la imagen no cabe en 32 bits")
    data = blob_id.as_bytes() + struct.pack("<I", img_size_bytes) + bytes(image_data_nonce)
    return encrypt(data, MessageType.IMAGE, public_key, private_key)


def encrypt_file_msg(
    file_message: "FileMessage", public_key: PublicKeyLike, private_key: PrivateKeyLike
) -> EncryptedMessage:
    """Cifra un :class:`~gateway_core.file_message.FileMessage` serializado."""

    return encrypt(file_message.to_json_bytes(), MessageType.FILE, public_key, private_key)


def _message_id_bytes(message_id: Union[bytes, str]) -> bytes:
    if isinstance(message_id, str):
        return hex_to_bytes(message_id, MESSAGE_ID_SIZE)
    if len(message_id) != MESSAGE_ID_SIZE:
        raise ValueError(f"Un id de mensaje debe tener {MESSAGE_ID_SIZE} bytes")
    return bytes(message_id)


def encrypt_delivery_receipt_msg(
    status: DeliveryReceiptStatus,
    message_ids: Iterable[Union[bytes, str]],
    public_key: PublicKeyLike,
    private_key: PrivateKeyLike,
) -> EncryptedMessage:
    """Cifra un acuse de entrega para uno o varios mensajes recibidos.

    Args:
        status (DeliveryReceiptStatus): Estado que se confirma.
        message_ids (Iterable[Union[bytes, str]]): Ids de 8 bytes o 16 caracteres hex.
        public_key (PublicKeyLike): Clave pública del destinatario.
        private_key (PrivateKeyLike): Clave privada propia.

    Returns:
        EncryptedMessage: Acuse cifrado.

    """

    ids = [_message_id_bytes(message_id) for message_id in message_ids]
    if not ids:
        raise ValueError("Se necesita al menos un id de mensaje")
    data = bytes([DeliveryReceiptStatus(status)]) + b"".join(ids)
    return encrypt(data, MessageType.DELIVERY_RECEIPT, public_key, private_key)
