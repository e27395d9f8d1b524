# --------------------------------------------------------------
# File: padding.py
# Description: Byte de tipo y relleno aleatorio estilo PKCS#7 del texto plano.
# --------------------------------------------------------------
"""Codificador de relleno para mensajes extremo a extremo.

El texto plano que se cifra tiene la forma ``[tipo] ++ carga ++ [P] * P`` con
``P`` elegido al azar en ``[1, 255]`` para ocultar la longitud real.
"""

from typing import Tuple

import nacl.utils

from gateway_core.errors import BadPadding

MAX_PADDING = 255


def random_padding_amount() -> int:
    """Devuelve una cantidad de relleno uniforme en el rango ``[1, 255]``.

    Returns:
        int: Número de bytes de relleno.

    """

    while True:
        value = nacl.utils.random(1)[0]
        # Se descarta 255 para que value + 1 quede en [1, 255] sin sesgo.
        if value < MAX_PADDING:
            return value + 1


def wrap(payload: bytes, msgtype: int) -> bytes:
    """Antepone el byte de tipo y añade relleno aleatorio autodescriptivo.

    Args:
        payload (bytes): Carga útil en claro.
        msgtype (int): Byte de tipo de mensaje (0-255).

    Returns:
        bytes: Texto plano con tipo y relleno, listo para cifrar.

    """

    if not 0 <= int(msgtype) <= 0xFF:
        raise ValueError("El tipo de mensaje debe caber en un byte")
    amount = random_padding_amount()
    return bytes([int(msgtype)]) + bytes(payload) + bytes([amount]) * amount


def unwrap(buffer: bytes) -> Tuple[int, bytes]:
    """Valida y elimina el relleno, devolviendo el tipo y la carga útil.

    Comprueba que todos los bytes de relleno valgan la longitud del relleno.

    Args:
        buffer (bytes): Texto plano descifrado.

    Returns:
        Tuple[int, bytes]: Byte de tipo y carga útil.

    Raises:
        BadPadding: Si el relleno es 0, no cabe junto al tipo o es inconsistente.

    """

    if not buffer:
        raise BadPadding("Buffer vacío")
    amount = buffer[-1]
    if amount == 0 or amount > len(buffer) - 1:
        raise BadPadding("Longitud de relleno inválida")
    if any(byte != amount for byte in buffer[-amount:]):
        raise BadPadding("Bytes de relleno inconsistentes")
    return buffer[0], bytes(buffer[1:-amount])


def strip_padding_length_only(buffer: bytes) -> bytes:
    """Elimina el relleno de un mensaje entrante comprobando solo su longitud.

    Los mensajes recibidos del gateway no revalidan el valor de cada byte de
    relleno; se conserva ese comportamiento por compatibilidad de formato. El
    byte de tipo sigue al principio del resultado.

    Args:
        buffer (bytes): Texto plano descifrado.

    Returns:
        bytes: Byte de tipo seguido de la carga útil.

    Raises:
        BadPadding: Si el relleno es 0 o no es menor que el buffer.

    """

    if not buffer:
        raise BadPadding("Buffer vacío")
    amount = buffer[-1]
    if amount == 0 or amount >= len(buffer):
        raise BadPadding("Longitud de relleno inválida")
    return bytes(buffer[:-amount])
