# --------------------------------------------------------------
# File: __init__.py
# Description: Manejador del gateway sin transporte y caché de claves.
# --------------------------------------------------------------
"""Inicializa el paquete `gateway_api`."""

__all__ = ["cache", "services"]
