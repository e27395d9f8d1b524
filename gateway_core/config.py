# --------------------------------------------------------------
# File: config.py
# Description: Configuración del gateway leída del entorno y de .env.
# --------------------------------------------------------------
import logging
import os

from dotenv import load_dotenv

load_dotenv()

GATEWAY_ID = os.getenv("GATEWAY_ID", "")
GATEWAY_SECRET = os.getenv("GATEWAY_SECRET", "")
GATEWAY_PRIVATE_KEY = os.getenv("GATEWAY_PRIVATE_KEY", "")
LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING").upper()


def configure_logging() -> None:
    """Aplica LOG_LEVEL a los loggers de los paquetes del gateway."""

    logging.basicConfig(format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    for name in ("gateway_core", "gateway_api"):
        logging.getLogger(name).setLevel(LOG_LEVEL)
