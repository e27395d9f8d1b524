# --------------------------------------------------------------
# File: 2_Cifrar_Mensaje.py
# Description: Cifra mensajes de texto y de archivo para un destinatario.
# --------------------------------------------------------------

import mimetypes

import streamlit as st

from gateway_api.services import E2eApi
from gateway_core.crypto_box import RecipientKey
from gateway_core.errors import GatewayCryptoError
from gateway_core.file_message import new_file_message
from gateway_core.types import BlobId

st.title("✉️ Cifrar mensaje")

gateway_id = st.text_input("Identidad del gateway", value="*XXXXXXX")
private_key = st.text_input("Clave privada propia (hex)", type="password")
recipient_hex = st.text_input("Clave pública del destinatario (hex)")

# Comprueba las claves antes de mostrar las pestañas de cifrado.
try:
    api = E2eApi(gateway_id, "", private_key) if private_key else None
    recipient = RecipientKey.from_hex(recipient_hex) if recipient_hex else None
except GatewayCryptoError as exc:
    st.error(f"Clave inválida: {exc}")
    st.stop()

if api is None or recipient is None:
    st.info("Introduce tu clave privada y la clave pública del destinatario.")
    st.stop()

tab_text, tab_file = st.tabs(["Texto", "Archivo"])

with tab_text:
    text = st.text_area("Mensaje")
    if st.button("Cifrar texto", disabled=not text, key="btn_text"):
        encrypted = api.encrypt_text_msg(text, recipient)
        st.success("Mensaje cifrado.")
        st.json(encrypted.as_form_fields())

with tab_file:
    f = st.file_uploader("Selecciona un archivo", type=None)
    if f and st.button("Cifrar archivo", key="btn_file"):
        data = f.read()
        encrypted_file, key = api.encrypt_file_data(data)
        st.session_state["pending_file"] = {
            "name": f.name,
            "size": len(data),
            "key": key.hex(),
            "media_type": mimetypes.guess_type(f.name)[0] or "application/octet-stream",
        }
        st.download_button("Descargar blob cifrado", encrypted_file.file, file_name=f.name + ".blob")
        st.caption("Sube el blob al servidor de blobs y pega aquí el id que devuelve.")

    pending = st.session_state.get("pending_file")
    blob_hex = st.text_input("Id del blob subido", key="blob_id")
    if pending and blob_hex and st.button("Cifrar mensaje de archivo", key="btn_file_msg"):
        try:
            file_message = new_file_message(
                file_blob_id=BlobId.from_str(blob_hex),
                media_type=pending["media_type"],
                blob_encryption_key=pending["key"],
                file_size_bytes=pending["size"],
                file_name=pending["name"],
            )
        except GatewayCryptoError as exc:
            st.error(str(exc))
            st.stop()
        encrypted = api.encrypt_file_msg(file_message, recipient)
        st.json(encrypted.as_form_fields())
