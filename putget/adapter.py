"""putget类型适配器.

提供类似于 Pydantic TypeAdapter 的接口,
用于处理泛型类型和基础类型的序列化/反序列化.
"""

from typing import Any, Generic, TypeVar

from pydantic import TypeAdapter

from .api import loads
from .config import Config
from .get import Get
from .options import Option
from .put import Put
from .serializable import codec_for

T = TypeVar("T")


class CodecAdapter(Generic[T]):
    """putget 类型适配器.

    编码前先用 `pydantic.TypeAdapter` 校验并转换输入,
    因此可以直接传入普通 Python 值 (如 `[1, 2, 3]` 对应 `list[Int32]`).

    支持的类型:
        - `Record` 子类与其他 Serializable 类型
        - 定宽类型 (`Int32`, `Float32` 等) 以及 `bool`, `str`, `bytes`, `float`
        - 容器类型 (`list[T]`, `tuple[...]`, `dict[K, V]`, `T | None`)

    Examples:
        >>> adapter = CodecAdapter(list[Int32])
        >>> data = adapter.dump_bytes([1, 2, 3])
        >>> adapter.validate_bytes(data)
        [Int32(1), Int32(2), Int32(3)]
    """

    def __init__(self, type_: type[T] | Any):
        """初始化类型适配器.

        Args:
            type_: 目标类型 (如 Record 子类, list[Int32], str 等).

        Raises:
            UnsupportedTypeError: 类型没有可移植的线上格式.
        """
        self._type = type_
        self._codec = codec_for(type_)
        self._pydantic_adapter = TypeAdapter(type_)

    @property
    def type(self) -> Any:
        """目标类型."""
        return self._type

    def validate_python(self, value: Any) -> T:
        """用 pydantic 校验并转换 Python 值."""
        return self._pydantic_adapter.validate_python(value)

    def dump_put(self, value: Any) -> Put:
        """校验后编码为 Put."""
        return self._codec.encode(self.validate_python(value))

    def dump_bytes(self, value: Any) -> bytes:
        """校验后编码为字节."""
        return self.dump_put(value).to_bytes()

    def get(self, option: Option = Option.NONE) -> Get[T]:
        """返回解码目标类型的 Get."""
        if option == Option.NONE:
            return self._codec.get
        return codec_for(self._type, Config.from_params(option=option)).get

    def validate_bytes(
        self, data: bytes | bytearray | memoryview, *, option: Option = Option.NONE
    ) -> T:
        """反序列化字节数据.

        Args:
            data: 输入字节.
            option: 解码选项 (如 `Option.REJECT_TRAILING`).

        Returns:
            解码出的值.
        """
        return loads(data, self._type, option=option)
