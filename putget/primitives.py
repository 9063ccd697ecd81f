"""基础线上格式编解码.

所有多字节整数一律大端序 (高位字节在前), 无填充, 无对齐.
有符号整数与浮点数不单独实现读写, 而是复用同宽度无符号整数的位模式:

    Int32  <- UInt32 的位模式按二进制补码重新解释
    Float32 <- UInt32 的位模式按 IEEE 754 重新解释

字符串/字节串使用 8 字节有符号大端长度前缀, 之后是负载字节.
"""

import struct

from .config import DEFAULT_MAX_LENGTH
from .exceptions import (
    InvalidDiscriminant,
    InvalidLengthError,
    MalformedPayloadError,
    ValueOutOfRangeError,
)
from .get import Get
from .put import Put

# 预编译的结构体打包器
_STRUCT_B = struct.Struct(">B")
_STRUCT_H = struct.Struct(">H")
_STRUCT_I = struct.Struct(">I")
_STRUCT_Q = struct.Struct(">Q")
_STRUCT_f = struct.Struct(">f")
_STRUCT_d = struct.Struct(">d")

_UNSIGNED = {1: _STRUCT_B, 2: _STRUCT_H, 4: _STRUCT_I, 8: _STRUCT_Q}


def check_range(value: int, width: int, signed: bool) -> int:
    """检查 `value` 是否能用 `width` 字节表示, 返回原值."""
    bits = width * 8
    if signed:
        low, high = -(1 << (bits - 1)), (1 << (bits - 1)) - 1
    else:
        low, high = 0, (1 << bits) - 1
    if not low <= value <= high:
        kind = "signed" if signed else "unsigned"
        raise ValueOutOfRangeError(
            f"{value} out of range for {bits}-bit {kind} integer [{low}, {high}]"
        )
    return value


def to_unsigned(value: int, width: int) -> int:
    """有符号值 -> 同宽度的无符号位模式."""
    return value & ((1 << (width * 8)) - 1)


def to_signed(value: int, width: int) -> int:
    """无符号位模式 -> 二进制补码有符号值."""
    sign_bit = 1 << (width * 8 - 1)
    return value - (sign_bit << 1) if value & sign_bit else value


# --- 无符号整数 ---


def put_unsigned(value: int, width: int) -> Put:
    """以 `width` 字节大端序写入无符号整数."""
    packer = _UNSIGNED[width]
    check_range(value, width, signed=False)
    return Put.by_writing_bytes(width, lambda buf: packer.pack_into(buf, 0, value))


def get_unsigned(width: int) -> Get[int]:
    """以 `width` 字节大端序读取无符号整数."""
    unpack = _UNSIGNED[width].unpack
    return Get.by_reading_bytes(width, lambda data: unpack(data)[0])


# --- 有符号整数 ---


def put_signed(value: int, width: int) -> Put:
    """写入有符号整数的无符号位模式."""
    check_range(value, width, signed=True)
    return put_unsigned(to_unsigned(value, width), width)


def get_signed(width: int) -> Get[int]:
    """读取无符号位模式并按二进制补码解释."""
    return get_unsigned(width).map(lambda bits: to_signed(bits, width))


# --- 浮点数位模式 ---


def float32_to_bits(value: float) -> int:
    """float -> IEEE 754 binary32 位模式. 超出范围时抛出 ValueOutOfRangeError."""
    try:
        return _STRUCT_I.unpack(_STRUCT_f.pack(value))[0]
    except OverflowError as e:
        raise ValueOutOfRangeError(f"{value} out of range for 32-bit float") from e


def bits_to_float32(bits: int) -> float:
    """IEEE 754 binary32 位模式 -> float."""
    return _STRUCT_f.unpack(_STRUCT_I.pack(bits))[0]


def float64_to_bits(value: float) -> int:
    """float -> IEEE 754 binary64 位模式."""
    return _STRUCT_Q.unpack(_STRUCT_d.pack(value))[0]


def bits_to_float64(bits: int) -> float:
    """IEEE 754 binary64 位模式 -> float."""
    return _STRUCT_d.unpack(_STRUCT_Q.pack(bits))[0]


# --- 布尔值 ---


def put_bool(value: bool) -> Put:
    """写入布尔值: False -> 0x00, True -> 0x01."""
    return put_unsigned(1 if value else 0, 1)


def _decode_bool(data: bytes) -> bool:
    if data[0] == 0:
        return False
    if data[0] == 1:
        return True
    raise InvalidDiscriminant(data[0], "bool")


def get_bool() -> Get[bool]:
    """读取布尔值. 0x00/0x01 以外的字节以 InvalidDiscriminant 失败."""
    return Get.by_reading_bytes(1, _decode_bool)


# --- 长度前缀 ---


def put_length(length: int) -> Put:
    """写入 8 字节有符号大端长度前缀."""
    return put_signed(length, 8)


def get_length(max_length: int = DEFAULT_MAX_LENGTH) -> Get[int]:
    """读取长度前缀, 拒绝负数和超过 `max_length` 的值."""

    def check(length: int) -> Get[int]:
        if length < 0:
            return Get.fail(InvalidLengthError(f"Negative length prefix: {length}"))
        if length > max_length:
            return Get.fail(
                InvalidLengthError(
                    f"Length prefix {length} exceeds max limit {max_length}"
                )
            )
        return Get.pure(length)

    return get_signed(8).flat_map(check)


# --- 字节串 ---


def put_byte_string(value: bytes | bytearray | memoryview) -> Put:
    """写入带长度前缀的字节串."""
    data = bytes(value)
    return put_length(len(data)).put_bytes(data)


def get_byte_string(max_length: int = DEFAULT_MAX_LENGTH) -> Get[bytes]:
    """读取带长度前缀的字节串."""
    return get_length(max_length).flat_map(Get.raw)


# --- 字符串 ---


def put_string(value: str) -> Put:
    """写入字符串: 长度前缀是 UTF-8 负载的字节数, 不是字符数."""
    return put_byte_string(value.encode("utf-8"))


def _decode_utf8(data: bytes) -> str:
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise MalformedPayloadError(f"Invalid UTF-8 string payload: {e.reason}") from e


def _decode_utf8_lenient(data: bytes) -> str:
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        return ""


def get_string(max_length: int = DEFAULT_MAX_LENGTH, lenient: bool = False) -> Get[str]:
    """读取字符串.

    Args:
        max_length: 长度前缀上限.
        lenient: 为 True 时非法 UTF-8 解码为空字符串 (旧版行为),
            否则以 MalformedPayloadError 失败.
    """
    decoder = _decode_utf8_lenient if lenient else _decode_utf8
    return get_length(max_length).flat_map(
        lambda n: Get.by_reading_bytes(n, decoder)
    )
