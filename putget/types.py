"""putget定宽数据类型模块.

本模块定义了可移植线上格式所需的定宽整数与浮点数类型.
每个类型都是 `int` 或 `float` 的子类, 并实现 `Serializable` 协议:

    >>> Int32(1).serialize().to_bytes()
    b'\\x00\\x00\\x00\\x01'
    >>> Int32.deserialize().decode(b"\\xff\\xff\\xff\\xff")
    Int32(-1)

Python 的 `int` 没有固定宽度, 因此不能直接序列化, 需要显式选择其中一个类型.
"""

import operator
from typing import Any, ClassVar

from typing_extensions import Self

from .exceptions import UnsupportedTypeError
from .get import Get
from .primitives import (
    bits_to_float32,
    bits_to_float64,
    check_range,
    float32_to_bits,
    float64_to_bits,
    get_signed,
    get_unsigned,
    put_signed,
    put_unsigned,
)
from .put import Put


class FixedInt(int):
    """定宽整数基类.

    构造时检查取值范围, 超出范围抛出 `ValueOutOfRangeError`.
    只接受整数 (包括 `bool`), 浮点数或字符串抛出 `UnsupportedTypeError`.
    """

    width: ClassVar[int]
    signed: ClassVar[bool]

    def __new__(cls, value: Any = 0) -> Self:
        if cls is FixedInt:
            raise TypeError("FixedInt is abstract, use Int8/UInt32/...")
        try:
            number = operator.index(value)
        except TypeError as e:
            raise UnsupportedTypeError(
                f"{cls.__name__} requires an integer, got {type(value).__name__}"
            ) from e
        check_range(number, cls.width, cls.signed)
        return super().__new__(cls, number)

    def serialize(self) -> Put:
        """编码为 `width` 字节大端序."""
        if self.signed:
            return put_signed(int(self), self.width)
        return put_unsigned(int(self), self.width)

    @classmethod
    def deserialize(cls) -> Get[Self]:
        """从 `width` 字节大端序解码."""
        getter = get_signed(cls.width) if cls.signed else get_unsigned(cls.width)
        return getter.map(cls)

    @classmethod
    def __get_pydantic_core_schema__(cls, source_type: Any, handler: Any) -> Any:
        from pydantic_core import core_schema

        return core_schema.no_info_plain_validator_function(
            cls._validate,
            serialization=core_schema.plain_serializer_function_ser_schema(int),
        )

    @classmethod
    def _validate(cls, value: Any) -> Self:
        if type(value) is cls:
            return value
        try:
            return cls(value)
        except UnsupportedTypeError as e:
            # pydantic 只把 ValueError 转换为 ValidationError
            raise ValueError(str(e)) from e

    def __repr__(self) -> str:
        return f"{type(self).__name__}({int(self)})"


class Int8(FixedInt):
    """1 字节有符号整数, 无符号字节按二进制补码解释."""

    width = 1
    signed = True


class Int16(FixedInt):
    """2 字节有符号大端整数."""

    width = 2
    signed = True


class Int32(FixedInt):
    """4 字节有符号大端整数."""

    width = 4
    signed = True


class Int64(FixedInt):
    """8 字节有符号大端整数."""

    width = 8
    signed = True


class UInt8(FixedInt):
    """1 字节无符号整数 (原始字节)."""

    width = 1
    signed = False


class UInt16(FixedInt):
    """2 字节无符号大端整数."""

    width = 2
    signed = False


class UInt32(FixedInt):
    """4 字节无符号大端整数."""

    width = 4
    signed = False


class UInt64(FixedInt):
    """8 字节无符号大端整数."""

    width = 8
    signed = False


class FixedFloat(float):
    """IEEE 754 浮点数基类.

    线上格式是同宽度无符号整数的位模式. 实例保存自身的位模式,
    因此 NaN 负载等无法通过 `float` 相等比较的值也能按位往返.
    """

    __slots__ = ("_bits",)

    width: ClassVar[int]
    _bits: int

    @staticmethod
    def _to_bits(value: float) -> int:
        raise NotImplementedError

    @staticmethod
    def _from_bits(bits: int) -> float:
        raise NotImplementedError

    def __new__(cls, value: Any = 0.0) -> Self:
        if cls is FixedFloat:
            raise TypeError("FixedFloat is abstract, use Float32/Float64")
        if isinstance(value, cls):
            return value
        if not isinstance(value, int | float):
            raise UnsupportedTypeError(
                f"{cls.__name__} requires a number, got {type(value).__name__}"
            )
        return cls.from_bits(cls._to_bits(float(value)))

    @classmethod
    def from_bits(cls, bits: int) -> Self:
        """由位模式构造."""
        check_range(bits, cls.width, signed=False)
        self = super().__new__(cls, cls._from_bits(bits))
        self._bits = bits
        return self

    @property
    def bits(self) -> int:
        """IEEE 754 位模式."""
        return self._bits

    def serialize(self) -> Put:
        """编码为位模式的大端字节."""
        return put_unsigned(self._bits, self.width)

    @classmethod
    def deserialize(cls) -> Get[Self]:
        """读取无符号位模式并按 IEEE 754 重新解释."""
        return get_unsigned(cls.width).map(cls.from_bits)

    @classmethod
    def __get_pydantic_core_schema__(cls, source_type: Any, handler: Any) -> Any:
        from pydantic_core import core_schema

        return core_schema.no_info_plain_validator_function(
            cls._validate,
            serialization=core_schema.plain_serializer_function_ser_schema(float),
        )

    @classmethod
    def _validate(cls, value: Any) -> Self:
        try:
            return cls(value)
        except UnsupportedTypeError as e:
            raise ValueError(str(e)) from e

    def __repr__(self) -> str:
        return f"{type(self).__name__}({float(self)!r})"


class Float32(FixedFloat):
    """4 字节 IEEE 754 binary32. 构造时舍入到最近的可表示值."""

    __slots__ = ()

    width = 4
    _to_bits = staticmethod(float32_to_bits)
    _from_bits = staticmethod(bits_to_float32)


class Float64(FixedFloat):
    """8 字节 IEEE 754 binary64."""

    __slots__ = ()

    width = 8
    _to_bits = staticmethod(float64_to_bits)
    _from_bits = staticmethod(bits_to_float64)
