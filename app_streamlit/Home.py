# --------------------------------------------------------------
# File: Home.py
# Description: Define la página principal de Streamlit con el resumen del flujo.
# --------------------------------------------------------------

import streamlit as st

from gateway_core.config import configure_logging

configure_logging()

# Configura los metadatos de la página principal de la aplicación.
st.set_page_config(page_title="Gateway E2E", page_icon="🔐", layout="centered")

# Presenta el nombre del producto y su propósito general.
st.title("🔐 Gateway E2E")
st.write(
    "Cifrado extremo a extremo de mensajes para el gateway: NaCl box con relleno "
    "aleatorio para mensajes y secretbox para archivos."
)
st.info("Empieza en **Generar Claves** si todavía no tienes un par de claves.")
