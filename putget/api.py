"""putget API模块.

提供用于序列化和反序列化的高级接口 `dumps`, `loads`, `dump`, `load`.
"""

from typing import IO, Any, TypeVar, overload

from .config import Config
from .exceptions import DecodeError, TrailingDataError
from .log import get_hexdump, logger
from .options import Option
from .serializable import codec_for, serialize

T = TypeVar("T")


def dumps(obj: Any, type_: Any = None) -> bytes:
    """序列化对象为字节数据.

    Args:
        obj: 要序列化的值. 支持 Serializable 实例 (定宽类型, `Record` 等),
            以及 `bool`, `str`, `bytes`, `float`.
        type_: 显式指定线上格式, 容器类型必须给出 (如 `list[Int32]`).

    Returns:
        bytes: 序列化后的二进制数据.

    Raises:
        UnsupportedTypeError: 值或类型没有可移植的线上格式 (如 `int`).
        ValueOutOfRangeError: 值超出定宽类型的范围.

    Examples:
        >>> from putget import dumps, UInt16
        >>> dumps(UInt16(0x0102))
        b'\\x01\\x02'
        >>> dumps("ab")
        b'\\x00\\x00\\x00\\x00\\x00\\x00\\x00\\x02ab'
    """
    return serialize(obj, type_).to_bytes()


def dump(obj: Any, fp: IO[bytes], type_: Any = None) -> None:
    """序列化对象并写入文件.

    Args:
        obj: 要序列化的对象.
        fp: 文件类对象, 必须实现 `write(bytes)` 方法.
        type_: 显式指定线上格式.
    """
    serialize(obj, type_).write_to(fp)


@overload
def loads(
    data: bytes | bytearray | memoryview,
    target: type[T],
    option: Option = Option.NONE,
    *,
    offset: int = 0,
    max_length: int | None = None,
    suppress_log: bool = False,
) -> T: ...


@overload
def loads(
    data: bytes | bytearray | memoryview,
    target: Any,
    option: Option = Option.NONE,
    *,
    offset: int = 0,
    max_length: int | None = None,
    suppress_log: bool = False,
) -> Any: ...


def loads(
    data: bytes | bytearray | memoryview,
    target: Any,
    option: Option = Option.NONE,
    *,
    offset: int = 0,
    max_length: int | None = None,
    suppress_log: bool = False,
) -> Any:
    """反序列化字节数据.

    Args:
        data: 输入字节.
        target: 目标类型 (如 `Int32`, `str`, `list[UInt8]`, `Record` 子类).
        option: 解码选项.
            - `Option.REJECT_TRAILING`: 解码后仍有剩余字节时抛出 TrailingDataError.
            - `Option.LENIENT_UTF8`: 非法 UTF-8 字符串解码为空字符串.
        offset: 开始解码的字节偏移量.
        max_length: 长度前缀上限.
        suppress_log: 为 True 时解码失败不记录错误日志.

    Returns:
        解码出的值.

    Raises:
        DecodeError: 解码失败. 子类区分截断、非法判别字节、非法负载等情况.
        UnsupportedTypeError: 目标类型没有可移植的线上格式.

    Examples:
        >>> from putget import loads, Int32
        >>> loads(b"\\x00\\x00\\x00\\x01", Int32)
        Int32(1)
    """
    config = Config.from_params(option=option, offset=offset, max_length=max_length)
    get = codec_for(target, config).get

    if not suppress_log:
        logger.debug("[loads] 开始解码 %d 字节 -> %r", len(data), target)

    try:
        value, end = get.run(data, config.offset)
        if config.reject_trailing and end != len(data):
            raise TrailingDataError(
                f"{len(data) - end} trailing bytes after decoded value", end
            )
    except DecodeError as e:
        if not suppress_log:
            logger.error(
                "[loads] 解码错误: %s\n%s", e, get_hexdump(data, e.offset or 0)
            )
        raise

    if not suppress_log:
        logger.debug("[loads] 成功解码, 消耗 %d 字节", end - config.offset)
    return value


def load(
    fp: IO[bytes],
    target: Any,
    option: Option = Option.NONE,
    *,
    max_length: int | None = None,
) -> Any:
    """从文件读取全部字节并反序列化.

    Args:
        fp: 文件类对象, 必须实现 `read()` 方法.
        target: 目标类型.
        option: 解码选项.
        max_length: 长度前缀上限.
    """
    return loads(fp.read(), target, option=option, max_length=max_length)
