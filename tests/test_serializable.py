"""Serializable 协议与编解码器解析测试.

覆盖 putget.serializable 模块:
1. 协议一致性 (自定义类型)
2. 内置类型与 int 禁用
3. 容器类型 (list, tuple, dict, Optional)
4. 类型推断 (serialize 未给出类型)
"""

from dataclasses import dataclass

import pytest
from typing_extensions import Self

from putget import (
    Config,
    Float64,
    Get,
    Int16,
    Int32,
    InvalidDiscriminant,
    InvalidLengthError,
    Option,
    Put,
    Serializable,
    UInt8,
    UnexpectedEndOfInput,
    UnsupportedTypeError,
    codec_for,
    deserialize,
    serialize,
)

# --- 辅助类型 ---


@dataclass(frozen=True)
class Point:
    """手写 Serializable 实现: 两个 Int16 坐标."""

    x: int
    y: int

    def serialize(self) -> Put:
        return Int16(self.x).serialize() + Int16(self.y).serialize()

    @classmethod
    def deserialize(cls) -> Get[Self]:
        return Int16.deserialize().flat_map(
            lambda x: Int16.deserialize().map(lambda y: cls(int(x), int(y)))
        )


def _round_trip(value, tp):
    data = serialize(value, tp).to_bytes()
    decoded, end = deserialize(tp).run(data)
    assert end == len(data)
    return decoded


# --- 1. 协议 ---


def test_custom_type_conforms():
    """实现了两个方法的类型应满足 Serializable 协议."""
    p = Point(1, -2)

    assert isinstance(p, Serializable)
    assert isinstance(Int32(1), Serializable)
    assert not isinstance("text", Serializable)
    assert serialize(p).to_bytes() == b"\x00\x01\xff\xfe"
    assert deserialize(Point).decode(b"\x00\x01\xff\xfe") == p


def test_generic_over_serializable():
    """泛型代码可以对任意 Serializable 类型工作."""

    def round_trip(value: Serializable) -> object:
        return type(value).deserialize().decode(value.serialize().to_bytes())

    for value in (Point(3, 4), Int32(-7), UInt8(9), Float64(2.5)):
        assert round_trip(value) == value


# --- 2. 内置类型 ---


@pytest.mark.parametrize(
    ("value", "tp", "expected"),
    [
        (True, bool, b"\x01"),
        (False, bool, b"\x00"),
        ("ab", str, b"\x00\x00\x00\x00\x00\x00\x00\x02ab"),
        ("", str, b"\x00" * 8),
        (b"\x00\xff", bytes, b"\x00\x00\x00\x00\x00\x00\x00\x02\x00\xff"),
        (1.0, float, b"\x3f\xf0\x00\x00\x00\x00\x00\x00"),
        (5, Int32, b"\x00\x00\x00\x05"),
    ],
)
def test_builtin_codecs(value, tp, expected):
    """内置类型的编码结果与线上格式一致, 且能往返."""
    assert serialize(value, tp).to_bytes() == expected
    assert _round_trip(value, tp) == value


def test_int_is_unsupported():
    """没有固定宽度的 int 不能编码或解码."""
    with pytest.raises(UnsupportedTypeError, match="fixed width"):
        serialize(5)
    with pytest.raises(UnsupportedTypeError, match="fixed width"):
        deserialize(int)
    with pytest.raises(UnsupportedTypeError):
        codec_for(list[int])


def test_bool_is_not_int():
    """bool 按布尔值编码, 不会被当作 int 拒绝."""
    assert serialize(True).to_bytes() == b"\x01"


def test_encode_type_mismatch():
    """值与声明的类型不符时应抛出 UnsupportedTypeError."""
    with pytest.raises(UnsupportedTypeError):
        serialize(1, str)
    with pytest.raises(UnsupportedTypeError):
        serialize("x", bool)
    with pytest.raises(UnsupportedTypeError):
        serialize(Int32(1), Point)


def test_unsupported_annotations():
    """没有线上格式的注解应被拒绝."""
    with pytest.raises(UnsupportedTypeError):
        codec_for(set[Int32])
    with pytest.raises(UnsupportedTypeError, match="Union"):
        codec_for(Int32 | str)


# --- 3. 容器类型 ---


def test_list_layout():
    """list[T] 使用 8 字节元素个数前缀."""
    data = serialize([1, 2], list[UInt8]).to_bytes()

    assert data == b"\x00\x00\x00\x00\x00\x00\x00\x02\x01\x02"
    assert deserialize(list[UInt8]).decode(data) == [1, 2]
    assert _round_trip([], list[str]) == []


def test_nested_containers_round_trip():
    """嵌套容器应能往返."""
    tp = dict[str, list[Int32 | None]]
    value = {"a": [Int32(1), None], "": [], "多字节": [Int32(-1)]}

    assert _round_trip(value, tp) == value


def test_fixed_tuple_has_no_prefix():
    """定长 tuple 元素首尾相接, 没有前缀."""
    tp = tuple[UInt8, bool, str]
    data = serialize((7, True, "x"), tp).to_bytes()

    assert data == b"\x07\x01" + b"\x00" * 7 + b"\x01x"
    assert deserialize(tp).decode(data) == (7, True, "x")


def test_variadic_tuple():
    """tuple[T, ...] 与 list[T] 格式相同, 解码为 tuple."""
    data = serialize((1, 2, 3), tuple[Int16, ...]).to_bytes()

    assert data == serialize([1, 2, 3], list[Int16]).to_bytes()
    assert deserialize(tuple[Int16, ...]).decode(data) == (1, 2, 3)


def test_tuple_length_mismatch():
    """定长 tuple 的元素个数必须匹配."""
    with pytest.raises(UnsupportedTypeError):
        serialize((1,), tuple[UInt8, UInt8])


def test_optional_discriminant():
    """Optional 使用 1 字节判别: 0 为 None, 1 为有值."""
    tp = Int32 | None

    assert serialize(None, tp).to_bytes() == b"\x00"
    assert serialize(5, tp).to_bytes() == b"\x01\x00\x00\x00\x05"
    assert deserialize(tp).decode(b"\x00") is None

    with pytest.raises(InvalidDiscriminant) as exc_info:
        deserialize(tp).run(b"\x02\x00\x00\x00\x05")
    assert exc_info.value.offset == 0


def test_list_length_limit_from_config():
    """容器长度前缀遵循配置中的上限."""
    data = serialize([1, 2, 3], list[UInt8]).to_bytes()
    config = Config.from_params(max_length=2)

    with pytest.raises(InvalidLengthError):
        deserialize(list[UInt8], config).run(data)


def test_container_count_limit_from_config():
    """容器元素个数遵循配置中的个数上限, 与 max_length 独立."""
    config = Config.from_params(max_count=2)
    items = serialize([1, 2, 3], list[UInt8]).to_bytes()
    pairs = serialize({1: True, 2: False, 3: True}, dict[UInt8, bool]).to_bytes()

    with pytest.raises(InvalidLengthError):
        deserialize(list[UInt8], config).run(items)
    with pytest.raises(InvalidLengthError):
        deserialize(dict[UInt8, bool], config).run(pairs)
    with pytest.raises(ValueError):
        Config.from_params(max_count=-1)


def test_huge_count_prefix_fails_fast():
    """巨大的元素个数前缀不会预先分配, 数据不足时在首个缺失元素处失败."""
    payload = b"\x00\x00\x00\x01"

    with pytest.raises(UnexpectedEndOfInput) as exc_info:
        deserialize(list[Int32]).run((5_000_000).to_bytes(8, "big") + payload)
    assert exc_info.value.offset == 12

    # 超过默认个数上限时在读取前缀后立即失败
    with pytest.raises(InvalidLengthError) as exc_info:
        deserialize(list[Int32]).run((30_000_000).to_bytes(8, "big") + payload)
    assert exc_info.value.offset == 8


def test_lenient_utf8_from_config():
    """LENIENT_UTF8 选项让 str 解码回退为空字符串."""
    data = b"\x00" * 7 + b"\x01\xff"
    config = Config.from_params(option=Option.LENIENT_UTF8)

    assert deserialize(str, config).decode(data) == ""


def test_self_referencing_type_resolves_lazily():
    """自引用类型的 Get 在执行时才构造, 不会无限递归."""

    @dataclass(frozen=True)
    class Chain:
        value: int
        next: "Chain | None"

        def serialize(self) -> Put:
            return UInt8(self.value).serialize() + serialize(self.next, Chain | None)

        @classmethod
        def deserialize(cls) -> Get[Self]:
            return UInt8.deserialize().flat_map(
                lambda v: deserialize(Chain | None).map(lambda n: cls(int(v), n))
            )

    chain = Chain(1, Chain(2, None))
    data = chain.serialize().to_bytes()

    assert data == b"\x01\x01\x02\x00"
    assert Chain.deserialize().decode(data) == chain


# --- 4. 类型推断 ---


def test_infer_rejects_containers():
    """容器必须显式给出类型."""
    with pytest.raises(UnsupportedTypeError, match="explicit type"):
        serialize([1, 2])


def test_infer_float_as_float64():
    """float 按 Float64 编码."""
    assert serialize(0.5).to_bytes() == Float64(0.5).serialize().to_bytes()
