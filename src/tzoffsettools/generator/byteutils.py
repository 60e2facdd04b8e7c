# Copyright 2023 Brian T. Park
#
# MIT License
"""
Utils for writing integers and strings to byte arrays in little endian format.
For negative integers, use 2's complement.
"""


def _check_range(x: int, low: int, high: int, type_name: str) -> None:
    if x > high:
        raise ValueError(f"x={x} > {high}, cannot write into {type_name}")
    if x < low:
        raise ValueError(f"x={x} < {low}, cannot write into {type_name}")


def _write_le(data: bytearray, x: int, num_bytes: int) -> None:
    for _ in range(num_bytes):
        data.append(x & 0xff)
        x >>= 8


def write_u8(data: bytearray, x: int) -> None:
    _check_range(x, 0, 255, 'uint8')
    _write_le(data, x, 1)


def write_i8(data: bytearray, x: int) -> None:
    _check_range(x, -128, 127, 'int8')
    _write_le(data, x + 256 if x < 0 else x, 1)


def write_u16(data: bytearray, x: int) -> None:
    _check_range(x, 0, 65535, 'uint16')
    _write_le(data, x, 2)


def write_i16(data: bytearray, x: int) -> None:
    _check_range(x, -32768, 32767, 'int16')
    _write_le(data, x + 65536 if x < 0 else x, 2)


def write_u32(data: bytearray, x: int) -> None:
    _check_range(x, 0, 4294967295, 'uint32')
    _write_le(data, x, 4)


def write_i32(data: bytearray, x: int) -> None:
    _check_range(x, -2147483648, 2147483647, 'int32')
    _write_le(data, x + 4294967296 if x < 0 else x, 4)


def write_string(data: bytearray, s: str) -> None:
    """Write the UTF-8 encoding of 's', prefixed by its uint16 length."""
    encoded = s.encode('utf-8')
    write_u16(data, len(encoded))
    data.extend(encoded)


def hex_encode(data: bytearray) -> str:
    """Render the bytes as a sequence of '\\xNN' escapes, for logging and
    debugging of the generated blob.
    """
    return ''.join(f'\\x{b:02x}' for b in data)
