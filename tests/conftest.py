# --------------------------------------------------------------
# File: conftest.py
# Description: Fixtures compartidas para aislar configuración y claves de prueba.
# --------------------------------------------------------------

import importlib
from typing import Iterator, Tuple

import pytest

# Vectores fijos: clave privada del remitente y clave pública del destinatario.
SENDER_SECRET = bytes([
    113, 146, 154, 1, 241, 143, 18, 181, 240, 174, 72, 16, 247, 83, 161, 29,
    215, 123, 130, 243, 235, 222, 137, 151, 107, 162, 47, 119, 98, 145, 68, 146,
])
RECIPIENT_PUBLIC = bytes([
    153, 153, 204, 118, 225, 119, 78, 112, 88, 6, 167, 2, 67, 73, 254, 255,
    96, 134, 225, 8, 36, 229, 124, 219, 43, 50, 241, 185, 244, 236, 55, 77,
])


@pytest.fixture(autouse=True)
def _isolate_config(monkeypatch) -> Iterator[None]:
    """Vacía la configuración del gateway y recarga gateway_core.config.

    Args:
        monkeypatch (pytest.MonkeyPatch): Fixture para ajustar variables de entorno.

    Returns:
        Iterator[None]: Control del fixture autouse durante la ejecución de cada test.
    """
    for name in ("GATEWAY_ID", "GATEWAY_SECRET", "GATEWAY_PRIVATE_KEY"):
        monkeypatch.setenv(name, "")

    import gateway_core.config as config_module

    importlib.reload(config_module)

    yield


@pytest.fixture
def alice() -> Tuple[bytes, bytes]:
    """Par de claves aleatorio (privada, pública) del remitente."""
    from gateway_core.crypto_box import generate_keypair

    return generate_keypair()


@pytest.fixture
def bob() -> Tuple[bytes, bytes]:
    """Par de claves aleatorio (privada, pública) del destinatario."""
    from gateway_core.crypto_box import generate_keypair

    return generate_keypair()


@pytest.fixture
def fixed_keys() -> Tuple[bytes, bytes]:
    """Vectores fijos (clave privada del remitente, clave pública del destinatario)."""
    return SENDER_SECRET, RECIPIENT_PUBLIC
