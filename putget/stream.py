"""putget流式处理模块.

该模块提供用于网络协议和流处理的 Writer 和 Reader 类.
支持增量编码和解码. 本库不执行任何 I/O: 调用方负责把
`PutWriter` 的缓冲区写出, 以及把收到的字节喂给 `GetReader`.
"""

from collections.abc import Generator
from typing import Any

from .config import Config
from .exceptions import UnexpectedEndOfInput
from .get import Get
from .log import logger
from .options import Option
from .put import Put
from .serializable import codec_for, serialize


class PutWriter:
    """流式写入器.

    允许增量序列化多个值到同一个缓冲区. 值之间没有分隔符,
    读取端需要按相同的类型顺序解码.
    """

    def __init__(self) -> None:
        self._buffer = bytearray()

    def write(self, obj: Any, type_: Any = None) -> None:
        """序列化值并追加到缓冲区."""
        self.write_put(serialize(obj, type_))

    def write_put(self, put: Put) -> None:
        """追加 Put 的字节."""
        self._buffer.extend(put.to_bytes())

    def write_bytes(self, data: bytes | bytearray | memoryview) -> None:
        """直接追加原始字节."""
        self._buffer.extend(data)

    def get_buffer(self) -> bytes:
        """获取缓冲区数据的副本."""
        return bytes(self._buffer)

    def clear(self) -> None:
        """清空缓冲区."""
        self._buffer.clear()

    def __len__(self) -> int:
        return len(self._buffer)


class GetReader:
    """流式读取器.

    通过 `feed()` 输入数据, 迭代时产出所有已完整到达的值.
    因截断而失败的值保留在缓冲区中, 等待更多数据后重试;
    其他解码错误直接抛出.

    Usage:
        >>> reader = GetReader(Int32)
        >>> reader.feed(b"\\x00\\x00\\x00\\x01\\x00\\x00")
        >>> list(reader)
        [Int32(1)]
        >>> reader.feed(b"\\x00\\x02")
        >>> list(reader)
        [Int32(2)]
    """

    def __init__(
        self,
        target: Any,
        option: Option = Option.NONE,
        max_buffer_size: int = 10 * 1024 * 1024,  # 10MB
        max_length: int | None = None,
    ):
        """初始化流式读取器.

        Args:
            target: 每个值的目标类型, 或直接给出一个 Get.
            option: 解码选项. `REJECT_TRAILING` 在流中没有意义, 会被忽略.
            max_buffer_size: 最大缓冲区大小 (防止内存耗尽).
            max_length: 长度前缀上限.
        """
        if isinstance(target, Get):
            self._get = target
        else:
            config = Config.from_params(option=option, max_length=max_length)
            self._get = codec_for(target, config).get
        self._target = target
        self._buffer = bytearray()
        self._max_buffer_size = max_buffer_size

    def feed(self, data: bytes | bytearray | memoryview) -> None:
        """输入数据到内部缓冲区."""
        if len(self._buffer) + len(data) > self._max_buffer_size:
            raise BufferError("GetReader buffer exceeded max size")
        self._buffer.extend(data)

    @property
    def pending(self) -> int:
        """缓冲区中尚未解码的字节数."""
        return len(self._buffer)

    def __iter__(self) -> Generator[Any, None, None]:
        """从缓冲区解析所有完整的值.

        Yields:
            解码出的值.
        """
        while self._buffer:
            # 每轮只复制一次缓冲区, 在副本上按偏移量连续解码
            data = bytes(self._buffer)
            pos = 0
            while pos < len(data):
                try:
                    value, end = self._get.run(data, pos)
                except UnexpectedEndOfInput as e:
                    if len(self._buffer) > len(data) - pos:
                        # 迭代期间又输入了数据, 重新复制后重试
                        break
                    logger.debug("[GetReader] 数据不完整, 等待更多数据: %s", e)
                    return

                if end == pos:
                    # 不消费字节的值会导致死循环
                    raise ValueError(f"Decoding {self._target!r} consumed no bytes")

                del self._buffer[: end - pos]
                pos = end
                yield value
