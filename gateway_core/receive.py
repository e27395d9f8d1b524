# --------------------------------------------------------------
# File: receive.py
# Description: Validación y descifrado de mensajes entrantes del webhook.
# --------------------------------------------------------------
"""Mensajes recibidos del gateway a través del callback HTTP.

El cuerpo de la petición es ``application/x-www-form-urlencoded``. Antes de
interpretar ningún campo se comprueba el HMAC-SHA256 calculado con el secreto
de la API sobre ``from``, ``to``, ``messageId``, ``date``, ``nonce`` y ``box``.
"""

from __future__ import annotations

import logging
import re
from typing import Dict, Mapping, Optional, Union
from urllib.parse import parse_qsl

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, hmac
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from gateway_core.crypto_box import PrivateKeyLike, PublicKeyLike, decrypt
from gateway_core.errors import InvalidMac, ParseError
from gateway_core.models import NONCE_SIZE
from gateway_core.padding import strip_padding_length_only
from gateway_core.types import hex_to_bytes

logger = logging.getLogger(__name__)

MAC_FIELDS = ("from", "to", "messageId", "date", "nonce", "box")
MAC_HEX = re.compile(r"[0-9a-fA-F]{64}")
MAX_FIELDS = 32
DATE_DIGITS = re.compile(r"[0-9]+")


def _hmac(fields: Mapping[str, str], secret: str) -> hmac.HMAC:
    mac = hmac.HMAC(secret.encode("utf-8"), hashes.SHA256())
    for name in MAC_FIELDS:
        mac.update(fields[name].encode("utf-8"))
    return mac


def compute_mac(fields: Mapping[str, str], secret: str) -> str:
    """Calcula el MAC en hex de los campos de un mensaje entrante.

    Args:
        fields (Mapping[str, str]): Campos con sus valores en bruto.
        secret (str): Secreto de la API del gateway.

    Returns:
        str: HMAC-SHA256 en 64 caracteres hex minúscula.

    """

    return _hmac(fields, secret).finalize().hex()


def _parse_form(data: Union[bytes, str]) -> Dict[str, str]:
    try:
        text = data.decode("utf-8") if isinstance(data, (bytes, bytearray)) else data
        # segmentos vacíos ("a=1&&b=2", "&" final) se ignoran; los pares sin "=" no
        text = "&".join(segment for segment in text.split("&") if segment)
        pairs = parse_qsl(
            text,
            keep_blank_values=True,
            strict_parsing=True,
            errors="strict",
            max_num_fields=MAX_FIELDS,
        )
    except ValueError:
        raise ParseError("Cuerpo url-encoded mal formado") from None

    fields: Dict[str, str] = {}
    for name, value in pairs:
        if name in fields:
            raise ParseError(f"Campo duplicado: {name}")
        fields[name] = value
    return fields


class IncomingMessage(BaseModel):
    """Mensaje entrante ya autenticado.

    Attributes:
        sender (str): Identidad del remitente (8 caracteres).
        recipient (str): Identidad propia de la API, normalmente con ``*``.
        message_id (str): Id del mensaje asignado por el remitente (hex).
        date (int): Marca temporal UNIX puesta por el remitente.
        nonce (bytes): Nonce de 24 bytes de la caja.
        box (bytes): Caja cifrada.
        mac (str): MAC verificado, en hex.
        nickname (Optional[str]): Apodo público del remitente.

    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    sender: str = Field(alias="from")
    recipient: str = Field(alias="to")
    message_id: str = Field(alias="messageId")
    date: int = Field(ge=0)
    nonce: bytes
    box: bytes
    mac: str
    nickname: Optional[str] = None

    @field_validator("date", mode="before")
    @classmethod
    def _parse_date(cls, value: Union[int, str]) -> Union[int, str]:
        # int() aceptaría " 12", "+5" o "1_000"
        if isinstance(value, str) and not DATE_DIGITS.fullmatch(value):
            raise ValueError("La fecha debe contener solo dígitos decimales")
        return value

    @field_validator("nonce", mode="before")
    @classmethod
    def _decode_nonce(cls, value: Union[bytes, str]) -> bytes:
        if isinstance(value, str):
            return hex_to_bytes(value, NONCE_SIZE)
        if len(value) != NONCE_SIZE:
            raise ValueError(f"El nonce debe tener {NONCE_SIZE} bytes")
        return value

    @field_validator("box", mode="before")
    @classmethod
    def _decode_box(cls, value: Union[bytes, str]) -> bytes:
        if isinstance(value, str):
            return hex_to_bytes(value)
        return value

    @classmethod
    def from_urlencoded_bytes(cls, data: Union[bytes, str], secret: str) -> "IncomingMessage":
        """Autentica y deserializa el cuerpo de una petición del webhook.

        Args:
            data (Union[bytes, str]): Cuerpo de la petición sin procesar.
            secret (str): Secreto de la API usado como clave del HMAC.

        Returns:
            IncomingMessage: Mensaje autenticado.

        Raises:
            ParseError: Si faltan campos, el MAC no es hex de 64 caracteres o
                algún campo está mal formado.
            InvalidMac: Si el MAC no coincide.

        """

        fields = _parse_form(data)

        mac_hex = fields.get("mac")
        if mac_hex is None or not MAC_HEX.fullmatch(mac_hex):
            raise ParseError("Falta el campo mac o no tiene 64 caracteres hex")
        missing = [name for name in MAC_FIELDS if name not in fields]
        if missing:
            raise ParseError(f"Faltan campos: {', '.join(missing)}")

        try:
            _hmac(fields, secret).verify(bytes.fromhex(mac_hex))
        except InvalidSignature:
            logger.warning("Mensaje entrante rechazado: MAC inválido")
            raise InvalidMac("MAC inválido") from None

        try:
            message = cls.model_validate(fields)
        except ValidationError:
            raise ParseError("Campos del mensaje entrante mal formados") from None
        logger.debug("Mensaje entrante %s verificado", message.message_id)
        return message

    def decrypt_box(self, public_key: PublicKeyLike, private_key: PrivateKeyLike) -> bytes:
        """Descifra la caja y elimina el relleno.

        Args:
            public_key (PublicKeyLike): Clave pública del remitente.
            private_key (PrivateKeyLike): Clave privada propia.

        Returns:
            bytes: Byte de tipo seguido de la carga útil.

        """

        return strip_padding_length_only(decrypt(self.box, self.nonce, public_key, private_key))
