# --------------------------------------------------------------
# File: 1_Generar_Claves.py
# Description: Genera pares de claves Curve25519 para la identidad del gateway.
# --------------------------------------------------------------

import streamlit as st

from gateway_core.crypto_box import generate_keypair

st.title("🔑 Generar claves")

if st.button("Generar nuevo par de claves", key="btn_keygen"):
    private_key, public_key = generate_keypair()
    st.code(f"Pública: {public_key.hex()}\nPrivada: {private_key.hex()}")
    # SECURITY: la clave privada solo se muestra; no se guarda en disco.
    st.warning("Guarda la clave privada en un lugar seguro y no la compartas.")
