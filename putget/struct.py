"""putget 记录类型定义模块."""

from typing import Any, ClassVar, get_args

from pydantic import BaseModel
from typing_extensions import Self

from .config import Config
from .exceptions import UnsupportedTypeError
from .get import Get
from .put import Put
from .serializable import Codec, codec_for

_DEFAULT_CONFIG = Config()


class Record(BaseModel):
    r"""定长布局记录基类.

    继承自 `pydantic.BaseModel`. 字段按声明顺序首尾相接编码, 没有标签,
    没有长度头, 也没有版本信息: 双方必须事先约定字段类型与顺序.

    核心特性:
        1. **声明式定义**: 使用 Python 类型注解定义字段的线上格式.
        2. **数据验证**: 利用 Pydantic 在构造时检查定宽类型的取值范围.
        3. **Serializable**: 提供 `serialize()` 与 `deserialize()`, 可嵌套在其他记录或容器中.

    Examples:
        >>> from putget import Int32, Record
        >>> class Point(Record):
        ...     x: Int32
        ...     y: Int32
        >>> Point(x=1, y=-1).serialize().to_bytes()
        b'\x00\x00\x00\x01\xff\xff\xff\xff'
        >>> Point.deserialize().decode(b"\x00\x00\x00\x01\xff\xff\xff\xff")
        Point(x=Int32(1), y=Int32(-1))

    注意:
        字段不能使用没有固定宽度的 `int`, 请改用 `Int32`/`UInt64` 等类型.
    """

    __putget_codecs__: ClassVar[
        dict[tuple[Any, ...], dict[str, Codec[Any]]] | None
    ] = None

    @classmethod
    def __pydantic_init_subclass__(cls, **kwargs: Any) -> None:
        super().__pydantic_init_subclass__(**kwargs)
        for name, field in cls.model_fields.items():
            if _contains_int(field.annotation):
                raise UnsupportedTypeError(
                    f"Field '{name}' of {cls.__name__} uses int, which has "
                    f"no fixed width; use Int32/Int64/UInt32/..."
                )

    @classmethod
    def _codecs(cls, config: Config | None = None) -> dict[str, Codec[Any]]:
        config = config or _DEFAULT_CONFIG
        cache = cls.__dict__.get("__putget_codecs__")
        if cache is None:
            cache = {}
            cls.__putget_codecs__ = cache

        # offset 不影响字段编解码器
        key = (config.flags, config.max_length, config.max_count)
        codecs = cache.get(key)
        if codecs is None:
            # 首次使用时才解析注解, 以支持前向引用和自引用
            if not cls.__pydantic_complete__:
                cls.model_rebuild()
            codecs = {
                name: codec_for(field.annotation, config)
                for name, field in cls.model_fields.items()
            }
            cache[key] = codecs
        return codecs

    def serialize(self) -> Put:
        """按字段声明顺序编码."""
        codecs = self._codecs()
        return Put.empty().concat(
            *(codec.encode(getattr(self, name)) for name, codec in codecs.items())
        )

    @classmethod
    def deserialize(cls, config: Config | None = None) -> Get[Self]:
        """按字段声明顺序解码并构造实例.

        Args:
            config: 解码配置, 其中的长度上限与 UTF-8 策略作用于所有字段.
        """
        codecs = cls._codecs(config)
        names = list(codecs)
        return Get.sequence(codec.get for codec in codecs.values()).map(
            lambda values: cls.model_validate(dict(zip(names, values)))
        )


def _contains_int(tp: Any) -> bool:
    # 包括 list[int], int | None 等嵌套位置
    if tp is int:
        return True
    return any(_contains_int(arg) for arg in get_args(tp))
