"""Serializable 协议与类型到编解码器的解析.

任何实现了 `serialize() -> Put` 与 `deserialize() -> Get[Self]` 的类型
都符合 `Serializable` 协议, 并应满足往返律:

    deserialize().decode(x.serialize().to_bytes()) == x

对于内置类型和泛型注解 (`list[Int32]`, `tuple[str, bool]`, `Int64 | None` 等),
`codec_for()` 通过组合基础编解码器得到对应的 `Codec`.
"""

import inspect
import types as stdlib_types
from collections.abc import Callable
from dataclasses import dataclass
from typing import (
    Any,
    Generic,
    Protocol,
    TypeVar,
    Union,
    get_args,
    get_origin,
    runtime_checkable,
)

from typing_extensions import Self

from .config import Config
from .exceptions import InvalidDiscriminant, UnsupportedTypeError
from .get import Get
from .primitives import (
    get_bool,
    get_byte_string,
    get_length,
    get_string,
    put_bool,
    put_byte_string,
    put_length,
    put_string,
    put_unsigned,
)
from .put import Put
from .types import FixedFloat, FixedInt, Float64

T = TypeVar("T")

_DEFAULT_CONFIG = Config()


@runtime_checkable
class Serializable(Protocol):
    """可序列化类型协议."""

    def serialize(self) -> Put:
        """编码当前值."""
        ...

    @classmethod
    def deserialize(cls) -> Get[Self]:
        """返回解码该类型的 Get."""
        ...


@dataclass(frozen=True)
class Codec(Generic[T]):
    """某个类型的编码函数与解码步骤.

    Attributes:
        encode: 值 -> Put.
        get: 解码该类型的 Get.
    """

    encode: Callable[[T], Put]
    get: Get[T]


def is_serializable_type(tp: Any) -> bool:
    """判断 `tp` 是否为实现了 Serializable 协议的类."""
    return (
        isinstance(tp, type)
        and callable(getattr(tp, "serialize", None))
        and callable(getattr(tp, "deserialize", None))
    )


def _defer(factory: Callable[[], Get[T]]) -> Get[T]:
    # 推迟到执行时才构造, 允许自引用的类型
    return Get.pure(None).flat_map(lambda _: factory())


def _expect(
    tp: type | tuple[type, ...], name: str, encode: Callable[[Any], Put]
) -> Callable[[Any], Put]:
    def checked(value: Any) -> Put:
        if not isinstance(value, tp):
            raise UnsupportedTypeError(
                f"Expected {name}, got {type(value).__name__}"
            )
        return encode(value)

    return checked


def _accepts_config(tp: type) -> bool:
    try:
        params = inspect.signature(tp.deserialize).parameters
    except (TypeError, ValueError):
        return False
    return "config" in params


def _serializable_codec(tp: type, config: Config) -> Codec[Any]:
    def encode(value: Any) -> Put:
        if not isinstance(value, tp):
            if issubclass(tp, FixedInt | FixedFloat):
                value = tp(value)
            else:
                raise UnsupportedTypeError(
                    f"Expected {tp.__name__}, got {type(value).__name__}"
                )
        return value.serialize()

    # Record 等类型可以接收解码配置, 使长度上限作用于嵌套字段
    if _accepts_config(tp):
        return Codec(encode, _defer(lambda: tp.deserialize(config=config)))
    return Codec(encode, _defer(tp.deserialize))


def _get_count(config: Config) -> Get[int]:
    # 元素个数同时受长度上限与个数上限约束
    return get_length(min(config.max_length, config.max_count))


def _sequence_codec(item: Codec[Any], config: Config, factory: type) -> Codec[Any]:
    def encode(values: Any) -> Put:
        if not isinstance(values, list | tuple):
            raise UnsupportedTypeError(
                f"Expected list or tuple, got {type(values).__name__}"
            )
        return put_length(len(values)).concat(*(item.encode(v) for v in values))

    get = _get_count(config).flat_map(item.get.replicate)
    if factory is tuple:
        get = get.map(tuple)
    return Codec(encode, get)


def _tuple_codec(items: list[Codec[Any]]) -> Codec[Any]:
    def encode(values: Any) -> Put:
        if not isinstance(values, list | tuple) or len(values) != len(items):
            raise UnsupportedTypeError(
                f"Expected a sequence of {len(items)} items, got {values!r}"
            )
        return Put.empty().concat(*(c.encode(v) for c, v in zip(items, values)))

    return Codec(encode, Get.sequence(c.get for c in items).map(tuple))


def _dict_codec(key: Codec[Any], value: Codec[Any], config: Config) -> Codec[Any]:
    def encode(mapping: Any) -> Put:
        if not isinstance(mapping, dict):
            raise UnsupportedTypeError(f"Expected dict, got {type(mapping).__name__}")
        put = put_length(len(mapping))
        for k, v in mapping.items():
            put = put.concat(key.encode(k), value.encode(v))
        return put

    pair = key.get.flat_map(lambda k: value.get.map(lambda v: (k, v)))
    get = _get_count(config).flat_map(pair.replicate).map(dict)
    return Codec(encode, get)


def _decode_presence(data: bytes) -> bool:
    if data[0] > 1:
        raise InvalidDiscriminant(data[0], "optional")
    return data[0] == 1


def _optional_codec(inner: Codec[Any]) -> Codec[Any]:
    def encode(value: Any) -> Put:
        if value is None:
            return put_unsigned(0, 1)
        return put_unsigned(1, 1).concat(inner.encode(value))

    get = Get.by_reading_bytes(1, _decode_presence).flat_map(
        lambda present: inner.get if present else Get.pure(None)
    )
    return Codec(encode, get)


def codec_for(tp: Any, config: Config | None = None) -> Codec[Any]:
    """解析类型注解对应的编解码器.

    Args:
        tp: 类型或泛型注解.
        config: 解码配置 (长度上限, UTF-8 策略).

    Raises:
        UnsupportedTypeError: 类型没有可移植的线上格式 (如 `int`).
    """
    config = config or _DEFAULT_CONFIG

    # bool 是 int 的子类, 必须先于 int 判断
    if tp is bool:
        return Codec(_expect(bool, "bool", put_bool), get_bool())
    if tp is int:
        raise UnsupportedTypeError(
            "int has no fixed width and cannot be serialized; "
            "use Int8/Int16/Int32/Int64 or UInt8/UInt16/UInt32/UInt64"
        )
    if tp is str:
        return Codec(
            _expect(str, "str", put_string),
            get_string(config.max_length, lenient=config.lenient_utf8),
        )
    if tp is bytes:
        return Codec(
            _expect((bytes, bytearray, memoryview), "bytes", put_byte_string),
            get_byte_string(config.max_length),
        )
    if tp is float:
        return _serializable_codec(Float64, config)
    if is_serializable_type(tp):
        return _serializable_codec(tp, config)

    origin = get_origin(tp)
    args = get_args(tp)

    if origin is list and len(args) == 1:
        return _sequence_codec(codec_for(args[0], config), config, list)
    if origin is tuple:
        if len(args) == 2 and args[1] is Ellipsis:
            return _sequence_codec(codec_for(args[0], config), config, tuple)
        return _tuple_codec([codec_for(arg, config) for arg in args])
    if origin is dict and len(args) == 2:
        return _dict_codec(
            codec_for(args[0], config), codec_for(args[1], config), config
        )
    if origin is Union or origin is stdlib_types.UnionType:
        non_none = [a for a in args if a is not type(None)]
        if len(non_none) == 1 and len(args) == 2:
            return _optional_codec(codec_for(non_none[0], config))
        raise UnsupportedTypeError(f"Union type not supported: {tp}")

    raise UnsupportedTypeError(f"Unsupported type for {tp}")


def _infer_type(value: Any) -> Any:
    if isinstance(value, bool):
        return bool
    if isinstance(value, Serializable):
        return type(value)
    if isinstance(value, str | bytes | bytearray | memoryview):
        return str if isinstance(value, str) else bytes
    if type(value) is float:
        return float
    if isinstance(value, int):
        return int  # codec_for 会拒绝
    raise UnsupportedTypeError(
        f"Cannot infer wire format for {type(value).__name__}; pass an explicit type"
    )


def serialize(value: Any, tp: Any = None) -> Put:
    """编码 `value`. 未给出 `tp` 时按值的类型推断."""
    if tp is None:
        tp = _infer_type(value)
    return codec_for(tp).encode(value)


def deserialize(tp: Any, config: Config | None = None) -> Get[Any]:
    """返回解码 `tp` 的 Get."""
    return codec_for(tp, config).get
