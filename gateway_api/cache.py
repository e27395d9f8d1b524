# --------------------------------------------------------------
# File: cache.py
# Description: Interfaz de caché de claves públicas proporcionada por el llamador.
# --------------------------------------------------------------
"""Resolución de claves públicas con una caché externa.

La biblioteca no almacena claves: el llamador aporta la caché y la función que
consulta el directorio del gateway.
"""

from typing import Callable, Optional, Protocol

from gateway_core.crypto_box import RecipientKey


class PublicKeyCache(Protocol):
    def store(self, identity: str, key: RecipientKey) -> None:
        ...

    def load(self, identity: str) -> Optional[RecipientKey]:
        ...


def resolve_recipient_key(
    identity: str, cache: PublicKeyCache, fetch: Callable[[str], str]
) -> RecipientKey:
    """Devuelve la clave de ``identity`` desde la caché o consultándola.

    Args:
        identity (str): Identidad del destinatario.
        cache (PublicKeyCache): Caché del llamador.
        fetch (Callable[[str], str]): Consulta externa que devuelve la clave en hex.

    Returns:
        RecipientKey: Clave pública del destinatario.

    Raises:
        BadKey: Si la clave obtenida no es válida; en ese caso no se guarda.

    """

    key = cache.load(identity)
    if key is not None:
        return key
    key = RecipientKey.from_hex(fetch(identity).strip())
    cache.store(identity, key)
    return key
