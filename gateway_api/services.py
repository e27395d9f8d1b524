# --------------------------------------------------------------
# File: services.py
# Description: Manejador E2E del gateway compuesto sobre el núcleo criptográfico.
# --------------------------------------------------------------
"""Capa de servicios para cifrar mensajes salientes y abrir los entrantes.

El manejador no conoce el transporte: devuelve ciphertext y nonce para que el
llamador los envíe, y recibe el cuerpo del webhook ya leído.
"""

import logging
from typing import Iterable, Optional, Tuple, Union

from gateway_core import config
from gateway_core.crypto_box import (
    PublicKeyLike,
    RecipientKey,
    encrypt,
    encrypt_delivery_receipt_msg,
    encrypt_file_msg,
    encrypt_image_msg,
    encrypt_raw,
    encrypt_text_msg,
    load_private_key,
)
from gateway_core.crypto_sym import SymmetricKey, encrypt_file_data
from gateway_core.errors import BadKey
from gateway_core.file_message import FileMessage
from gateway_core.models import EncryptedFileData, EncryptedMessage
from gateway_core.receive import IncomingMessage
from gateway_core.types import BlobId, DeliveryReceiptStatus

logger = logging.getLogger(__name__)


class E2eApi:
    """Identidad del gateway con su secreto y su clave privada.

    Args:
        gateway_id (str): Identidad de la API, normalmente ``*XXXXXXX``.
        secret (str): Secreto de la API, clave del MAC de los webhooks.
        private_key (Union[bytes, str]): Clave privada en bruto o en hex.

    Raises:
        BadKey: Si la clave privada no es válida.

    """

    def __init__(self, gateway_id: str, secret: str, private_key: Union[bytes, str]) -> None:
        self.id = gateway_id
        self.secret = secret
        self._private_key = load_private_key(private_key)

    @property
    def public_key(self) -> RecipientKey:
        return RecipientKey(bytes(self._private_key.public_key))

    def encrypt_raw(self, data: bytes, recipient_key: PublicKeyLike) -> EncryptedMessage:
        return encrypt_raw(data, recipient_key, self._private_key)

    def encrypt(self, data: bytes, msgtype: int, recipient_key: PublicKeyLike) -> EncryptedMessage:
        return encrypt(data, msgtype, recipient_key, self._private_key)

    def encrypt_text_msg(self, text: str, recipient_key: PublicKeyLike) -> EncryptedMessage:
        return encrypt_text_msg(text, recipient_key, self._private_key)

    def encrypt_image_msg(
        self,
        blob_id: BlobId,
        img_size_bytes: int,
        image_data_nonce: bytes,
        recipient_key: PublicKeyLike,
    ) -> EncryptedMessage:
        return encrypt_image_msg(
            blob_id, img_size_bytes, image_data_nonce, recipient_key, self._private_key
        )

    def encrypt_file_msg(
        self, file_message: FileMessage, recipient_key: PublicKeyLike
    ) -> EncryptedMessage:
        return encrypt_file_msg(file_message, recipient_key, self._private_key)

    def encrypt_delivery_receipt_msg(
        self,
        status: DeliveryReceiptStatus,
        message_ids: Iterable[Union[bytes, str]],
        recipient_key: PublicKeyLike,
    ) -> EncryptedMessage:
        return encrypt_delivery_receipt_msg(
            status, message_ids, recipient_key, self._private_key
        )

    def encrypt_file_data(
        self, file_bytes: bytes, thumbnail_bytes: Optional[bytes] = None
    ) -> Tuple[EncryptedFileData, SymmetricKey]:
        """Cifra un archivo antes de subirlo; no depende del destinatario."""

        return encrypt_file_data(file_bytes, thumbnail_bytes)

    def parse_incoming(self, body: Union[bytes, str]) -> IncomingMessage:
        """Autentica el cuerpo de un webhook con el secreto de esta API."""

        return IncomingMessage.from_urlencoded_bytes(body, self.secret)

    def decrypt_incoming(
        self, message: IncomingMessage, sender_key: PublicKeyLike
    ) -> Tuple[int, bytes]:
        """Descifra un mensaje entrante y separa el byte de tipo.

        Args:
            message (IncomingMessage): Mensaje ya autenticado.
            sender_key (PublicKeyLike): Clave pública del remitente.

        Returns:
            Tuple[int, bytes]: Byte de tipo y carga útil.

        """

        data = message.decrypt_box(sender_key, self._private_key)
        logger.debug("Mensaje de %s descifrado, tipo 0x%02x", message.sender, data[0])
        return data[0], data[1:]


def api_from_env() -> E2eApi:
    """Construye un :class:`E2eApi` con la configuración del entorno.

    Returns:
        E2eApi: Manejador listo para cifrar y recibir.

    Raises:
        ValueError: Si faltan la identidad o el secreto.
        BadKey: Si falta la clave privada o no es válida.

    """

    if not config.GATEWAY_ID or not config.GATEWAY_SECRET:
        raise ValueError("GATEWAY_ID y GATEWAY_SECRET son obligatorios")
    if not config.GATEWAY_PRIVATE_KEY:
        raise BadKey("GATEWAY_PRIVATE_KEY no está configurada")
    return E2eApi(config.GATEWAY_ID, config.GATEWAY_SECRET, config.GATEWAY_PRIVATE_KEY)
