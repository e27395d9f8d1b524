# --------------------------------------------------------------
# File: test_crypto_box.py
# Description: Pruebas del cifrado de clave pública de mensajes.
# --------------------------------------------------------------

import json
import os

import pytest

from gateway_core.crypto_box import (
    RecipientKey,
    decrypt,
    decrypt_message,
    encrypt,
    encrypt_delivery_receipt_msg,
    encrypt_file_msg,
    encrypt_image_msg,
    encrypt_raw,
    encrypt_text_msg,
    load_private_key,
)
from gateway_core.errors import BadKey, BadNonce, DecryptionFailed, EncryptionFailed
from gateway_core.file_message import new_file_message
from gateway_core.types import BlobId, DeliveryReceiptStatus, MessageType


@pytest.mark.parametrize("data", [b"", b"mensaje muy secreto", os.urandom(4000)])
def test_encrypt_decrypt_roundtrip(alice, bob, data):
    """Comprueba que el destinatario recupere tipo y carga del remitente.

    Args:
        alice (tuple[bytes, bytes]): Claves del remitente.
        bob (tuple[bytes, bytes]): Claves del destinatario.
        data (bytes): Carga útil de prueba.
    """
    alice_sk, alice_pk = alice
    bob_sk, bob_pk = bob
    encrypted = encrypt(data, MessageType.TEXT, bob_pk, alice_sk)
    assert decrypt_message(encrypted.ciphertext, encrypted.nonce, alice_pk, bob_sk) == (
        MessageType.TEXT,
        data,
    )


def test_encrypt_raw_does_not_pad(alice, bob):
    """encrypt_raw cifra los bytes tal cual, sin tipo ni relleno."""
    alice_sk, alice_pk = alice
    bob_sk, bob_pk = bob
    encrypted = encrypt_raw(b"raw", RecipientKey(bob_pk), alice_sk)
    assert decrypt(encrypted.ciphertext, encrypted.nonce, alice_pk, bob_sk) == b"raw"


def test_nonce_is_fresh_each_call(alice, bob):
    """Cada cifrado usa un nonce aleatorio distinto de 24 bytes."""
    alice_sk, _ = alice
    _, bob_pk = bob
    nonces = {encrypt_raw(b"x", bob_pk, alice_sk).nonce for _ in range(200)}
    assert len(nonces) == 200
    assert all(len(nonce) == 24 for nonce in nonces)


def test_decrypt_fails_with_wrong_key(alice, bob):
    """Una clave pública distinta no autentica la caja."""
    alice_sk, _ = alice
    bob_sk, bob_pk = bob
    encrypted = encrypt(b"hola", MessageType.TEXT, bob_pk, alice_sk)
    with pytest.raises(DecryptionFailed):
        decrypt(encrypted.ciphertext, encrypted.nonce, bob_pk, bob_sk)


def test_decrypt_detects_tampering(alice, bob):
    """Alterar el ciphertext o el nonce provoca fallo de autenticación."""
    alice_sk, alice_pk = alice
    bob_sk, bob_pk = bob
    encrypted = encrypt(b"hola", MessageType.TEXT, bob_pk, alice_sk)
    ct = encrypted.ciphertext
    tampered = bytes([ct[0] ^ 1]) + ct[1:]
    with pytest.raises(DecryptionFailed):
        decrypt(tampered, encrypted.nonce, alice_pk, bob_sk)
    bad_nonce = bytes([encrypted.nonce[0] ^ 1]) + encrypted.nonce[1:]
    with pytest.raises(DecryptionFailed):
        decrypt(ct, bad_nonce, alice_pk, bob_sk)


def test_decrypt_rejects_bad_nonce_length(alice, bob):
    """Un nonce que no tiene 24 bytes se rechaza antes de abrir la caja."""
    alice_sk, alice_pk = alice
    with pytest.raises(BadNonce):
        decrypt(b"\x00" * 32, b"\x00" * 12, alice_pk, alice_sk)


def test_low_order_public_key_is_rejected(alice):
    """Una clave pública de orden bajo produce errores tipados al cifrar y descifrar."""
    alice_sk, _ = alice
    zero_key = RecipientKey(bytes(32))
    with pytest.raises(EncryptionFailed):
        encrypt_text_msg("hola", zero_key, alice_sk)
    with pytest.raises(DecryptionFailed):
        decrypt(b"\x00" * 40, b"\x00" * 24, bytes(32), alice_sk)


def test_encrypt_image_msg_vector(fixed_keys):
    """Reproduce el vector de referencia del mensaje de imagen.

    Args:
        fixed_keys (tuple[bytes, bytes]): Clave privada fija y clave pública fija.
    """
    own_sec, other_pub = fixed_keys
    blob_id = BlobId.from_str("00112233445566778899aabbccddeeff")
    blob_nonce = os.urandom(24)

    encrypted = encrypt_image_msg(blob_id, 258, blob_nonce, RecipientKey(other_pub), own_sec)

    # La caja se abre con el mismo secreto compartido desde cualquiera de los lados.
    decrypted = decrypt(encrypted.ciphertext, encrypted.nonce, other_pub, own_sec)
    padding = decrypted[-1]
    assert decrypted[-padding:] == bytes([padding]) * padding
    data = decrypted[:-padding]
    assert len(data) == 45
    assert data[0] == MessageType.IMAGE
    assert data[1:17] == blob_id.as_bytes()
    assert data[17:21] == bytes([2, 1, 0, 0])
    assert data[21:45] == blob_nonce


def test_encrypt_image_msg_validates_arguments(fixed_keys):
    """El nonce del blob debe tener 24 bytes y el tamaño caber en u32."""
    own_sec, other_pub = fixed_keys
    blob_id = BlobId(bytes(16))
    with pytest.raises(BadNonce):
        encrypt_image_msg(blob_id, 1, b"\x00" * 23, other_pub, own_sec)
    with pytest.raises(ValueError):
        encrypt_image_msg(blob_id, 2**32, b"\x00" * 24, other_pub, own_sec)


def test_encrypt_text_msg_is_utf8(alice, bob):
    """Los mensajes de texto se codifican en UTF-8 con tipo TEXT."""
    alice_sk, alice_pk = alice
    bob_sk, bob_pk = bob
    encrypted = encrypt_text_msg("¡Hola, señor!", bob_pk, alice_sk)
    msgtype, payload = decrypt_message(encrypted.ciphertext, encrypted.nonce, alice_pk, bob_sk)
    assert msgtype == MessageType.TEXT
    assert payload.decode("utf-8") == "¡Hola, señor!"


def test_encrypt_file_msg_carries_json(alice, bob):
    """El mensaje de archivo lleva el JSON compacto con tipo FILE."""
    alice_sk, alice_pk = alice
    bob_sk, bob_pk = bob
    msg = new_file_message(
        file_blob_id="0123456789abcdef0123456789abcdef",
        media_type="application/pdf",
        blob_encryption_key=bytes(32),
        file_size_bytes=2048,
    )
    encrypted = encrypt_file_msg(msg, bob_pk, alice_sk)
    msgtype, payload = decrypt_message(encrypted.ciphertext, encrypted.nonce, alice_pk, bob_sk)
    assert msgtype == MessageType.FILE
    assert json.loads(payload)["b"] == "0123456789abcdef0123456789abcdef"


def test_encrypt_delivery_receipt(alice, bob):
    """El acuse lleva el estado seguido de los ids de 8 bytes."""
    alice_sk, alice_pk = alice
    bob_sk, bob_pk = bob
    encrypted = encrypt_delivery_receipt_msg(
        DeliveryReceiptStatus.READ, ["0102030405060708", b"\xff" * 8], bob_pk, alice_sk
    )
    msgtype, payload = decrypt_message(encrypted.ciphertext, encrypted.nonce, alice_pk, bob_sk)
    assert msgtype == MessageType.DELIVERY_RECEIPT
    assert payload == b"\x02" + bytes(range(1, 9)) + b"\xff" * 8


def test_encrypt_delivery_receipt_requires_ids(alice, bob):
    """Un acuse sin ids de mensaje no se puede construir."""
    with pytest.raises(ValueError):
        encrypt_delivery_receipt_msg(DeliveryReceiptStatus.RECEIVED, [], bob[1], alice[0])


def test_recipient_key_from_bytes():
    """Solo se aceptan claves públicas de 32 bytes."""
    assert RecipientKey.from_bytes(bytes(32)).as_bytes() == bytes(32)
    with pytest.raises(BadKey):
        RecipientKey.from_bytes(bytes(24))


@pytest.mark.parametrize(
    "encoded",
    [
        "5cf143cd8f3652f31d9b44786c323fbc222ecfcbb8dac5caf5caa257ac272df0",
        "5CF143CD8F3652F31D9B44786C323FBC222ECFCBB8DAC5CAF5CAA257AC272DF0",
    ],
)
def test_recipient_key_from_hex(encoded):
    """La forma hex se acepta en mayúsculas o minúsculas.

    Args:
        encoded (str): Clave pública en hex.
    """
    key = RecipientKey.from_hex(encoded)
    assert str(key) == encoded.lower()
    assert key == RecipientKey.from_hex(encoded.lower())


@pytest.mark.parametrize(
    "encoded",
    [
        "5cf143cd8f3652f31d9b44786c323fbc222ecfcbb8dac5ca",
        "qyz143cd8f3652f31d9b44786c323fbc222ecfcbb8dac5caf5caa257ac272df0",
    ],
)
def test_recipient_key_from_hex_rejects_invalid(encoded):
    """Claves cortas o con caracteres no hex se rechazan.

    Args:
        encoded (str): Clave pública inválida.
    """
    with pytest.raises(BadKey):
        RecipientKey.from_hex(encoded)


def test_recipient_key_as_string():
    """La representación textual es hex en minúsculas."""
    raw = bytearray(32)
    raw[0] = 0xFF
    raw[31] = 0xEE
    assert str(RecipientKey(bytes(raw))) == "ff" + "00" * 30 + "ee"


def test_load_private_key_rejects_invalid():
    """Las claves privadas mal formadas producen BadKey."""
    with pytest.raises(BadKey):
        load_private_key(b"\x00" * 31)
    with pytest.raises(BadKey):
        load_private_key("zz" * 32)
    assert bytes(load_private_key("00" * 32)) == bytes(32)
