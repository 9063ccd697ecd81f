"""putget 解码选项.

该模块定义了用于控制 `loads` 等入口函数行为的选项标志.
字节序不是选项: 所有多字节整数一律使用大端序.
"""

from enum import IntFlag


class Option(IntFlag):
    """putget 选项标志.

    可以使用位运算组合多个选项:
        option = Option.REJECT_TRAILING | Option.LENIENT_UTF8
    """

    # 默认行为: 允许尾随数据, UTF-8 校验失败即报错
    NONE = 0x0000

    # 顶层解码结束后仍有剩余字节时报错
    REJECT_TRAILING = 0x0001

    # 旧版行为: 非法 UTF-8 字符串解码为空字符串而不是报错
    LENIENT_UTF8 = 0x0002
