# --------------------------------------------------------------
# File: 3_Recibir_Webhook.py
# Description: Valida el MAC de un webhook y descifra el mensaje recibido.
# --------------------------------------------------------------

import streamlit as st

from gateway_api.services import E2eApi
from gateway_core.errors import GatewayCryptoError, InvalidMac
from gateway_core.file_message import FileMessage
from gateway_core.types import MessageType

st.title("📥 Recibir webhook")

secret = st.text_input("Secreto de la API", type="password")
private_key = st.text_input("Clave privada propia (hex)", type="password")
sender_hex = st.text_input("Clave pública del remitente (hex)")
body = st.text_area("Cuerpo de la petición (url-encoded)")

if st.button("Validar y descifrar", disabled=not (secret and private_key and body)):
    try:
        api = E2eApi("", secret, private_key)
        message = api.parse_incoming(body.strip())
    except InvalidMac:
        st.error("❌ MAC inválido: mensaje rechazado.")
        st.stop()
    except GatewayCryptoError as exc:
        st.error(f"Mensaje rechazado: {exc}")
        st.stop()

    st.success("✅ MAC verificado")
    st.write("**De:**", message.sender)
    st.write("**Para:**", message.recipient)
    st.write("**Id de mensaje:**", message.message_id)
    st.write("**Fecha:**", message.date)
    st.write("**Apodo:**", message.nickname or "-")

    if sender_hex:
        try:
            msgtype, payload = api.decrypt_incoming(message, bytes.fromhex(sender_hex))
        except (GatewayCryptoError, ValueError) as exc:
            st.error(f"No se pudo descifrar: {exc}")
            st.stop()
        if msgtype == MessageType.TEXT:
            st.code(payload.decode("utf-8", errors="replace"))
        elif msgtype == MessageType.FILE:
            try:
                st.json(FileMessage.from_json(payload).to_wire_dict())
            except GatewayCryptoError as exc:
                st.error(f"Mensaje de archivo inválido: {exc}")
        else:
            st.code(f"tipo=0x{msgtype:02x}\n{payload.hex()}")
