# --------------------------------------------------------------
# File: __init__.py
# Description: Exposición pública del núcleo criptográfico del gateway.
# --------------------------------------------------------------
"""Inicializa el paquete `gateway_core` y documenta sus módulos principales."""

__all__ = [
    "config",
    "crypto_box",
    "crypto_sym",
    "errors",
    "file_message",
    "models",
    "padding",
    "receive",
    "types",
]
