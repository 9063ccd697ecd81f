"""putget 异常类.

该模块为 putget 库定义了异常层次结构.
所有异常都在调用方可捕获的范围内抛出, 不会终止宿主进程.
"""


class PutGetError(Exception):
    """所有 putget 异常的基类."""

    pass


class EncodeError(PutGetError):
    """序列化失败时抛出.

    Case:
        - 写入函数改变了缓冲区长度.
        - 值超出定宽类型的范围 (如 `UInt8` 存了 300).
        - 类型不支持编码 (如没有固定宽度的 `int`).
    """

    pass


class PutSizeError(EncodeError):
    """`Put.by_writing_bytes` 的写入函数产出的字节数与声明不符时抛出."""

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(
            f"Put writer produced {actual} bytes, expected exactly {expected}"
        )
        self.expected = expected
        self.actual = actual


class ValueOutOfRangeError(EncodeError, ValueError):
    """值超出目标定宽类型的表示范围时抛出."""

    pass


class UnsupportedTypeError(EncodeError, TypeError):
    """类型没有可移植的线上格式时抛出.

    Python 的 `int` 没有固定宽度, 必须显式选用 `Int32`/`UInt64` 等类型.
    """

    pass


class DecodeError(PutGetError):
    """反序列化失败时抛出.

    Case:
        - 输入数据被截断.
        - 判别字节无效 (如布尔值不是 0/1).
        - 负载格式错误 (如非法 UTF-8).
    """

    def __init__(self, msg: str, offset: int | None = None) -> None:
        """初始化解码错误.

        Args:
            msg: 错误描述信息.
            offset: 出错步骤开始处的字节偏移量.
        """
        super().__init__(msg)
        self.msg = msg
        self.offset = offset

    def __str__(self) -> str:
        if self.offset is not None:
            return f"{self.msg} (at offset {self.offset})"
        return self.msg


class UnexpectedEndOfInput(DecodeError):
    """剩余字节少于解码步骤所需时抛出.

    在流式场景中可以等待更多数据后重试, 参见 `GetReader`.
    """

    def __init__(
        self, needed: int, available: int, offset: int | None = None
    ) -> None:
        super().__init__(
            f"Unexpected end of input: needed {needed} bytes, {available} available",
            offset,
        )
        self.needed = needed
        self.available = available


class InvalidDiscriminant(DecodeError):
    """字节不对应目标类型的任何合法取值时抛出."""

    def __init__(
        self, value: int, type_name: str, offset: int | None = None
    ) -> None:
        super().__init__(f"Invalid discriminant {value:#04x} for {type_name}", offset)
        self.value = value
        self.type_name = type_name


class MalformedPayloadError(DecodeError):
    """负载无法还原为值时抛出 (如 UTF-8 校验失败)."""

    pass


class InvalidLengthError(DecodeError):
    """长度前缀为负数或超过上限时抛出."""

    pass


class TrailingDataError(DecodeError):
    """启用 `Option.REJECT_TRAILING` 且解码后仍有剩余字节时抛出."""

    pass
