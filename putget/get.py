"""Get 解码器实现.

`Get[A]` 描述 "从当前游标处消费字节并产出一个 `A` 或失败" 的解码步骤.
它本身不持有数据与游标, 只有在 `run()` 时才针对给定字节序列执行.

执行模型:
    - 严格从左到右消费, 不回溯. 任一步骤失败则整个解码失败.
    - 成功读取 N 字节的步骤恰好让游标前进 N; 失败时不产生任何可观察的部分消费.
    - `run()` 用显式的续体栈解释步骤树, 代替递归调用栈,
      因此长链 `flat_map` 不会触发递归上限.
"""

from collections.abc import Callable, Iterable
from typing import Any, Generic, TypeVar, cast

from .exceptions import DecodeError, InvalidLengthError, UnexpectedEndOfInput

A = TypeVar("A")
B = TypeVar("B")

Buffer = bytes | bytearray | memoryview

# 步骤类型
_READ = 0
_PURE = 1
_FAIL = 2
_REMAINING = 3
_MAP = 4
_BIND = 5

_KIND_NAMES = {
    _READ: "read",
    _PURE: "pure",
    _FAIL: "fail",
    _REMAINING: "remaining",
    _MAP: "map",
    _BIND: "flat_map",
}


class Get(Generic[A]):
    """可组合的解码步骤.

    通常不直接构造, 而是通过 `by_reading_bytes`, `pure`, `fail` 等工厂方法
    以及 `map`, `flat_map` 组合得到.

    Examples:
        >>> be16 = Get.by_reading_bytes(2, lambda b: (b[0] << 8) | b[1])
        >>> be16.run(b"\\x01\\x02\\xff")
        (258, 2)

        先读长度, 再按长度读取负载:

        >>> blob = Get.by_reading_bytes(1, lambda b: b[0]).flat_map(Get.raw)
        >>> blob.decode(b"\\x03abc")
        b'abc'
    """

    __slots__ = ("_arg", "_fn", "_kind")

    _kind: int
    _arg: Any
    _fn: Any

    def __init__(self, kind: int, arg: Any = None, fn: Any = None) -> None:
        self._kind = kind
        self._arg = arg
        self._fn = fn

    # --- 基本构造 ---

    @classmethod
    def by_reading_bytes(cls, n: int, decoder: Callable[[bytes], A]) -> "Get[A]":
        """读取恰好 `n` 字节并交给 `decoder` 计算值.

        剩余字节不足时以 `UnexpectedEndOfInput` 失败, 游标不变.
        `n` 为负数时以 `InvalidLengthError` 失败.
        `decoder` 抛出的 `DecodeError` 会被标注为该步骤起始的偏移量.
        """
        return cls(_READ, n, decoder)

    @classmethod
    def pure(cls, value: A) -> "Get[A]":
        """不消费任何字节, 直接产出 `value`."""
        return cls(_PURE, value)

    @classmethod
    def fail(cls, error: DecodeError) -> "Get[Any]":
        """不消费任何字节, 以 `error` 失败.

        每次执行抛出的都是 `error` 的副本, `error` 本身不会被修改.
        如果 `error` 未携带偏移量, 副本会记录失败所在的偏移量.
        """
        if not isinstance(error, DecodeError):
            raise TypeError(f"Expected DecodeError, got {type(error).__name__}")
        return cls(_FAIL, error)

    @classmethod
    def remaining(cls) -> "Get[int]":
        """产出尚未读取的字节数, 不消费任何字节."""
        return cast("Get[int]", cls(_REMAINING))

    @classmethod
    def raw(cls, n: int) -> "Get[bytes]":
        """原样读取 `n` 字节."""
        return cast("Get[bytes]", cls.by_reading_bytes(n, _identity))

    @classmethod
    def skip(cls, n: int) -> "Get[None]":
        """丢弃 `n` 字节."""
        return cast("Get[None]", cls.by_reading_bytes(n, _discard))

    @staticmethod
    def sequence(gets: Iterable["Get[A]"]) -> "Get[list[A]]":
        """依次执行 `gets`, 按顺序产出结果列表."""
        steps = tuple(gets)

        def loop(index: int, acc: list[A]) -> "Get[list[A]]":
            if index == len(steps):
                return Get.pure(acc)

            def push(value: A) -> "Get[list[A]]":
                acc.append(value)
                return loop(index + 1, acc)

            return steps[index].flat_map(push)

        # 每次执行都使用新的累加列表
        return Get.pure(None).flat_map(lambda _: loop(0, []))

    # --- 组合 ---

    def map(self, f: Callable[[A], B]) -> "Get[B]":
        """对解码出的值应用纯函数 `f`, 不额外消费字节."""
        return Get(_MAP, self, f)

    def flat_map(self, f: Callable[[A], "Get[B]"]) -> "Get[B]":
        """用本步骤的结果选择并执行下一个步骤.

        本步骤失败时 `f` 不会被调用, 失败原样传播.
        """
        return Get(_BIND, self, f)

    def then(self, other: "Get[B]") -> "Get[B]":
        """先执行本步骤, 丢弃其结果后执行 `other`."""
        return self.flat_map(lambda _: other)

    def replicate(self, n: int) -> "Get[list[A]]":
        """重复执行本步骤 `n` 次.

        步骤在执行时逐个展开, 因此巨大的 `n` 在数据不足时会立即失败,
        不会预先分配 `n` 个步骤.
        """
        if n < 0:
            raise ValueError(f"Cannot replicate a negative number of times: {n}")

        def loop(index: int, acc: list[A]) -> "Get[list[A]]":
            if index == n:
                return Get.pure(acc)

            def push(value: A) -> "Get[list[A]]":
                acc.append(value)
                return loop(index + 1, acc)

            return self.flat_map(push)

        return Get.pure(None).flat_map(lambda _: loop(0, []))

    # --- 执行 ---

    def run(self, data: Buffer, offset: int = 0) -> tuple[A, int]:
        """针对 `data` 从 `offset` 开始执行解码.

        Args:
            data: 输入字节序列. 不会被修改.
            offset: 起始游标.

        Returns:
            tuple[A, int]: (解码出的值, 解码结束后的游标). 尾随数据不会被拒绝.

        Raises:
            DecodeError: 解码失败, `offset` 属性指向失败位置.
            ValueError: 起始游标越界.
        """
        view = memoryview(data)
        if view.format != "B" or view.ndim != 1:
            view = view.cast("B")
        end = len(view)
        if offset < 0 or offset > end:
            raise ValueError(f"offset {offset} out of range for {end} bytes")

        pos = offset
        # 续体栈: (类型, 函数)
        conts: list[tuple[int, Callable[[Any], Any]]] = []
        node: Get[Any] = self
        value: Any = None

        try:
            while True:
                kind = node._kind

                if kind == _MAP or kind == _BIND:
                    conts.append((kind, node._fn))
                    node = node._arg
                    continue

                if kind == _READ:
                    n = node._arg
                    if n < 0:
                        raise InvalidLengthError(f"Cannot read negative length: {n}")
                    if n > end - pos:
                        raise UnexpectedEndOfInput(n, end - pos, pos)
                    value = node._fn(view[pos : pos + n].tobytes())
                    pos += n
                elif kind == _PURE:
                    value = node._arg
                elif kind == _REMAINING:
                    value = end - pos
                else:
                    # Get 可重复执行, 偏移量只标注在本次执行的副本上
                    raise _fresh_error(node._arg)

                while conts:
                    kind, fn = conts.pop()
                    if kind == _MAP:
                        value = fn(value)
                        continue
                    node = fn(value)
                    if not isinstance(node, Get):
                        raise TypeError(
                            f"flat_map function must return Get, got {type(node).__name__}"
                        )
                    break
                else:
                    return cast(A, value), pos
        except DecodeError as e:
            if e.offset is None:
                e.offset = pos
            raise

    def decode(self, data: Buffer, offset: int = 0) -> A:
        """执行解码并只返回值."""
        return self.run(data, offset)[0]

    def __repr__(self) -> str:
        return f"Get<{_KIND_NAMES[self._kind]}>"


def _fresh_error(error: DecodeError) -> DecodeError:
    # 不调用 __init__, 子类的构造参数各不相同
    cls = type(error)
    copied = cls.__new__(cls, *error.args)
    copied.args = error.args
    copied.__dict__.update(error.__dict__)
    return copied


def _identity(data: bytes) -> bytes:
    return data


def _discard(data: bytes) -> None:
    return None
