"""putget 配置对象."""

from dataclasses import dataclass

from .options import Option

# 长度前缀上限 (字符串/字节串/容器)
DEFAULT_MAX_LENGTH = 100 * 1024 * 1024  # 100MB
# 容器元素个数上限
DEFAULT_MAX_COUNT = 10_000_000


@dataclass(frozen=True)
class Config:
    """putget 反序列化配置 (不可变).

    在 API 入口层创建, 然后传递给类型解析层.

    Attributes:
        flags: 选项标志 (IntFlag).
        offset: 开始解码的字节偏移量.
        max_length: 长度前缀允许的最大值.
        max_count: 容器元素个数允许的最大值.
    """

    flags: Option = Option.NONE
    offset: int = 0
    max_length: int = DEFAULT_MAX_LENGTH
    max_count: int = DEFAULT_MAX_COUNT

    @classmethod
    def from_params(
        cls,
        option: Option = Option.NONE,
        offset: int = 0,
        max_length: int | None = None,
        max_count: int | None = None,
    ) -> "Config":
        """从参数构建配置对象.

        Args:
            option: Option 枚举.
            offset: 开始解码的字节偏移量.
            max_length: 长度前缀上限, None 表示使用默认值.
            max_count: 容器元素个数上限, None 表示使用默认值.

        Returns:
            Config: 配置对象.
        """
        if offset < 0:
            raise ValueError(f"offset cannot be negative: {offset}")
        if max_length is None:
            max_length = DEFAULT_MAX_LENGTH
        elif max_length < 0:
            raise ValueError(f"max_length cannot be negative: {max_length}")

        if max_count is None:
            max_count = DEFAULT_MAX_COUNT
        elif max_count < 0:
            raise ValueError(f"max_count cannot be negative: {max_count}")

        return cls(
            flags=option, offset=offset, max_length=max_length, max_count=max_count
        )

    @property
    def reject_trailing(self) -> bool:
        """是否拒绝尾随数据."""
        return bool(self.flags & Option.REJECT_TRAILING)

    @property
    def lenient_utf8(self) -> bool:
        """是否对非法 UTF-8 使用空字符串回退."""
        return bool(self.flags & Option.LENIENT_UTF8)
