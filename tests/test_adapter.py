"""putget 类型适配器测试.

覆盖 putget.adapter 模块的核心特性:
1. 记录类型适配
2. 普通 Python 值的校验与转换
3. 泛型容器适配
4. 异常处理
"""

import pytest
from pydantic import ValidationError

from putget import (
    CodecAdapter,
    Int32,
    Option,
    Record,
    TrailingDataError,
    UInt8,
    UnsupportedTypeError,
)

# --- 辅助结构体 ---


class User(Record):
    """用户信息."""

    uid: Int32
    name: str


# --- 测试用例 ---


def test_adapter_record():
    """CodecAdapter 应能编解码 Record, 并接受 dict 输入."""
    adapter = CodecAdapter(User)

    data = adapter.dump_bytes({"uid": 100, "name": "Alice"})
    user = adapter.validate_bytes(data)

    assert user == User(uid=100, name="Alice")
    assert data == User(uid=100, name="Alice").serialize().to_bytes()


def test_adapter_list_of_plain_ints():
    """普通 int 列表经校验后按声明的定宽类型编码."""
    adapter = CodecAdapter(list[Int32])

    data = adapter.dump_bytes([1, 2, 3])

    assert data == b"\x00" * 7 + b"\x03" + b"".join(
        Int32(i).serialize().to_bytes() for i in (1, 2, 3)
    )
    result = adapter.validate_bytes(data)
    assert result == [1, 2, 3]
    assert all(type(v) is Int32 for v in result)


def test_adapter_dict():
    """dict 容器适配."""
    adapter = CodecAdapter(dict[str, UInt8])
    value = {"a": 1, "b": 255}

    assert adapter.validate_bytes(adapter.dump_bytes(value)) == value


def test_adapter_get_composes():
    """adapter.get() 返回的 Get 可以继续组合."""
    adapter = CodecAdapter(UInt8)
    get = adapter.get().flat_map(lambda n: adapter.get().replicate(n))

    assert get.decode(b"\x02\x0a\x0b") == [10, 11]


def test_adapter_validation_error():
    """超出范围的输入应在编码前被 pydantic 拒绝."""
    adapter = CodecAdapter(list[UInt8])

    with pytest.raises(ValidationError):
        adapter.dump_bytes([1, 256])


def test_adapter_unsupported_type():
    """没有线上格式的类型在构造适配器时即被拒绝."""
    with pytest.raises(UnsupportedTypeError):
        CodecAdapter(int)


def test_adapter_reject_trailing():
    """validate_bytes() 支持解码选项."""
    adapter = CodecAdapter(UInt8)

    assert adapter.validate_bytes(b"\x01\x02") == 1
    with pytest.raises(TrailingDataError):
        adapter.validate_bytes(b"\x01\x02", option=Option.REJECT_TRAILING)


def test_adapter_get_with_option():
    """get() 可以按选项重新解析编解码器."""
    adapter = CodecAdapter(str)
    data = b"\x00" * 7 + b"\x01\xff"

    assert adapter.type is str
    assert adapter.get(Option.LENIENT_UTF8).decode(data) == ""
