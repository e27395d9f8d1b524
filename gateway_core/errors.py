# --------------------------------------------------------------
# File: errors.py
# Description: Jerarquía de excepciones del núcleo criptográfico del gateway.
# --------------------------------------------------------------
"""Errores tipados que devuelve el núcleo al llamador.

Los mensajes nunca incluyen material secreto ni explican por qué falló una
autenticación, solo el tipo de error.
"""


class GatewayCryptoError(Exception):
    """Error base de todas las operaciones del núcleo."""


class BadKey(GatewayCryptoError):
    """Clave con formato o longitud incorrectos."""


class BadNonce(GatewayCryptoError):
    """Nonce con longitud incorrecta."""


class BadPadding(GatewayCryptoError):
    """Relleno con longitud 0, fuera de rango o con bytes inconsistentes."""


class EncryptionFailed(GatewayCryptoError):
    """El cifrado no se ha podido completar."""


class DecryptionFailed(GatewayCryptoError):
    """Fallo de autenticación al descifrar."""


class InvalidMac(GatewayCryptoError):
    """El MAC de un mensaje entrante no coincide."""


class ParseError(GatewayCryptoError, ValueError):
    """Campos de wire mal formados, longitudes erróneas o hex inválido."""


class InvalidFileMessage(GatewayCryptoError, ValueError):
    """Combinación de campos no permitida en un mensaje de archivo."""
