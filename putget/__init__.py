"""二进制序列化核心库.

提供了字节序列构建器 `Put`, 可组合的解码器 `Get`, 以及
`Serializable` 协议下的定宽类型, 字符串和 `Record` 编解码.
"""

from .adapter import CodecAdapter
from .api import dump, dumps, load, loads
from .config import Config
from .exceptions import (
    DecodeError,
    EncodeError,
    InvalidDiscriminant,
    InvalidLengthError,
    MalformedPayloadError,
    PutGetError,
    PutSizeError,
    TrailingDataError,
    UnexpectedEndOfInput,
    UnsupportedTypeError,
    ValueOutOfRangeError,
)
from .get import Get
from .options import Option
from .put import Put
from .serializable import Codec, Serializable, codec_for, deserialize, serialize
from .stream import GetReader, PutWriter
from .struct import Record
from .types import (
    FixedFloat,
    FixedInt,
    Float32,
    Float64,
    Int8,
    Int16,
    Int32,
    Int64,
    UInt8,
    UInt16,
    UInt32,
    UInt64,
)

__version__ = "0.1.0"

__all__ = [
    "Codec",
    "CodecAdapter",
    "Config",
    "DecodeError",
    "EncodeError",
    "FixedFloat",
    "FixedInt",
    "Float32",
    "Float64",
    "Get",
    "GetReader",
    "Int8",
    "Int16",
    "Int32",
    "Int64",
    "InvalidDiscriminant",
    "InvalidLengthError",
    "MalformedPayloadError",
    "Option",
    "Put",
    "PutGetError",
    "PutSizeError",
    "PutWriter",
    "Record",
    "Serializable",
    "TrailingDataError",
    "UInt8",
    "UInt16",
    "UInt32",
    "UInt64",
    "UnexpectedEndOfInput",
    "UnsupportedTypeError",
    "ValueOutOfRangeError",
    "__version__",
    "codec_for",
    "deserialize",
    "dump",
    "dumps",
    "load",
    "loads",
    "serialize",
]
