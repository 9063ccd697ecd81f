"""Put 字节序列构建器.

`Put` 是一个不可变的、只追加的字节序列描述. 拼接两个 `Put` 得到新的
`Put`, 原有对象保持不变. 内部以绳索 (rope) 形式保存片段, 只在真正需要
字节时才展开, 因此长链拼接不会产生平方级的复制.
"""

from collections.abc import Callable, Iterator
from typing import IO

from .exceptions import PutSizeError

Writer = Callable[[bytearray], None]


class Put:
    """不可变的字节序列构建器.

    Examples:
        >>> p = Put.from_bytes(b"\\x01") + Put.from_bytes(b"\\x02")
        >>> p.to_bytes()
        b'\\x01\\x02'
        >>> len(p)
        2
    """

    __slots__ = ("_data", "_left", "_right", "_size")

    _size: int
    _data: bytes | None
    _left: "Put | None"
    _right: "Put | None"

    def __init__(self) -> None:
        """构造空的 Put. 通常应使用工厂方法."""
        self._size = 0
        self._data = b""
        self._left = None
        self._right = None

    @classmethod
    def _leaf(cls, data: bytes) -> "Put":
        put = cls.__new__(cls)
        put._size = len(data)
        put._data = data
        put._left = None
        put._right = None
        return put

    @classmethod
    def _node(cls, left: "Put", right: "Put") -> "Put":
        put = cls.__new__(cls)
        put._size = left._size + right._size
        put._data = None
        put._left = left
        put._right = right
        return put

    @classmethod
    def empty(cls) -> "Put":
        """返回不产生任何字节的 Put (拼接的单位元)."""
        return cls._leaf(b"")

    @classmethod
    def from_bytes(cls, data: bytes | bytearray | memoryview) -> "Put":
        """返回原样输出 `data` 的 Put."""
        return cls._leaf(bytes(data))

    @classmethod
    def by_writing_bytes(cls, n: int, writer: Writer) -> "Put":
        """构造恰好 `n` 字节的 Put.

        Args:
            n: 输出字节数.
            writer: 接收长度为 `n` 且已清零的 `bytearray` 并填充它.

        Raises:
            ValueError: `n` 为负数.
            PutSizeError: 写入函数改变了缓冲区长度.
        """
        if n < 0:
            raise ValueError(f"Put size cannot be negative: {n}")
        buf = bytearray(n)
        writer(buf)
        if len(buf) != n:
            raise PutSizeError(n, len(buf))
        return cls._leaf(bytes(buf))

    def concat(self, *others: "Put") -> "Put":
        """返回依次输出本对象和 `others` 字节的新 Put.

        既可以作为方法调用 `a.concat(b)`, 也可以写作 `Put.concat(a, b)`.
        """
        result = self
        for other in others:
            if not isinstance(other, Put):
                raise TypeError(f"Expected Put, got {type(other).__name__}")
            if not other._size:
                continue
            if not result._size:
                result = other
                continue
            result = Put._node(result, other)
        return result

    def put_bytes(self, data: bytes | bytearray | memoryview) -> "Put":
        """在本对象之后追加原始字节."""
        return self.concat(Put.from_bytes(data))

    def __add__(self, other: object) -> "Put":
        if not isinstance(other, Put):
            return NotImplemented
        return self.concat(other)

    def __len__(self) -> int:
        return self._size

    def _chunks(self) -> Iterator[bytes]:
        # 显式栈展开, 避免深层拼接链触发递归上限
        stack: list[Put] = [self]
        while stack:
            node = stack.pop()
            if node._data is not None:
                if node._data:
                    yield node._data
                continue
            stack.append(node._right)  # type: ignore[arg-type]
            stack.append(node._left)  # type: ignore[arg-type]

    def to_bytes(self) -> bytes:
        """展开为字节序列."""
        if self._data is not None:
            return self._data
        return b"".join(self._chunks())

    def __bytes__(self) -> bytes:
        return self.to_bytes()

    def write_to(self, fp: IO[bytes]) -> int:
        """将字节依次写入文件类对象, 返回写入的字节数."""
        for chunk in self._chunks():
            fp.write(chunk)
        return self._size

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Put):
            return NotImplemented
        return self._size == other._size and self.to_bytes() == other.to_bytes()

    def __hash__(self) -> int:
        return hash(self.to_bytes())

    def __repr__(self) -> str:
        data = self.to_bytes()
        preview = data[:16].hex(" ")
        if len(data) > 16:
            preview += " ..."
        return f"Put({self._size} bytes: {preview})"
