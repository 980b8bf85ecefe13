# Copyright 2025 Hathor Labs
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#    http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

r"""
Generic values, for when the shape of a document isn't known ahead of time.

A value is one of the frozen dataclasses below, each tagged with the element type it maps to. Documents and arrays
hold other values, so a whole document becomes a tree. Everything here is built only on top of the public methods of
`BsonReader` and `BsonWriter`.

>>> document = BsonDocument({
...     'name': BsonString('John Doe'),
...     'tags': BsonArray([BsonString('developer'), BsonInt32(30)]),
... })
>>> data = encode_document(document)
>>> len(data), int.from_bytes(data[:4], 'little')
(59, 59)
>>> decode_document(data) == document
True
>>> to_python(decode_document(data))
{'name': 'John Doe', 'tags': ['developer', 30]}
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, ClassVar, Optional, Union

from typing_extensions import TypeAlias, assert_never

from bsonstream.bson.reader import BsonReader
from bsonstream.bson.types import OBJECT_ID_SIZE, BsonBinarySubType, BsonType, type_name
from bsonstream.bson.writer import BsonWriter
from bsonstream.conf.settings import CodecSettings
from bsonstream.serialization.exceptions import (
    InvalidArgumentError,
    InvalidOperationError,
    UnknownTypeError,
    UnsupportedTypeError,
)
from bsonstream.serialization.types import Buffer


@dataclass(frozen=True, slots=True)
class BsonDouble:
    bson_type: ClassVar[BsonType] = BsonType.DOUBLE
    value: float


@dataclass(frozen=True, slots=True)
class BsonString:
    bson_type: ClassVar[BsonType] = BsonType.STRING
    value: str


@dataclass(frozen=True, slots=True)
class BsonDocument:
    """Mapping from element name to value, in the order the elements appear on the wire."""
    bson_type: ClassVar[BsonType] = BsonType.DOCUMENT
    elements: dict[str, BsonValue] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class BsonArray:
    bson_type: ClassVar[BsonType] = BsonType.ARRAY
    items: list[BsonValue] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class BsonBinary:
    bson_type: ClassVar[BsonType] = BsonType.BINARY
    data: bytes
    subtype: Union[BsonBinarySubType, int] = BsonBinarySubType.GENERIC


@dataclass(frozen=True, slots=True)
class BsonUndefined:
    bson_type: ClassVar[BsonType] = BsonType.UNDEFINED


@dataclass(frozen=True, slots=True)
class BsonObjectId:
    bson_type: ClassVar[BsonType] = BsonType.OBJECT_ID
    value: bytes

    def __post_init__(self) -> None:
        if len(self.value) != OBJECT_ID_SIZE:
            raise InvalidArgumentError(f'ObjectId must be exactly {OBJECT_ID_SIZE} bytes, got {len(self.value)}')


@dataclass(frozen=True, slots=True)
class BsonBoolean:
    bson_type: ClassVar[BsonType] = BsonType.BOOLEAN
    value: bool


@dataclass(frozen=True, slots=True)
class BsonDateTime:
    bson_type: ClassVar[BsonType] = BsonType.DATETIME
    value: datetime


@dataclass(frozen=True, slots=True)
class BsonNull:
    bson_type: ClassVar[BsonType] = BsonType.NULL


@dataclass(frozen=True, slots=True)
class BsonRegex:
    bson_type: ClassVar[BsonType] = BsonType.REGEX
    pattern: str
    options: str = ''


@dataclass(frozen=True, slots=True)
class BsonJavaScript:
    bson_type: ClassVar[BsonType] = BsonType.JAVASCRIPT
    code: str


@dataclass(frozen=True, slots=True)
class BsonSymbol:
    bson_type: ClassVar[BsonType] = BsonType.SYMBOL
    value: str


@dataclass(frozen=True, slots=True)
class BsonInt32:
    bson_type: ClassVar[BsonType] = BsonType.INT32
    value: int


@dataclass(frozen=True, slots=True)
class BsonTimestamp:
    bson_type: ClassVar[BsonType] = BsonType.TIMESTAMP
    increment: int
    seconds: int


@dataclass(frozen=True, slots=True)
class BsonInt64:
    bson_type: ClassVar[BsonType] = BsonType.INT64
    value: int


BsonValue: TypeAlias = Union[
    BsonDouble,
    BsonString,
    BsonDocument,
    BsonArray,
    BsonBinary,
    BsonUndefined,
    BsonObjectId,
    BsonBoolean,
    BsonDateTime,
    BsonNull,
    BsonRegex,
    BsonJavaScript,
    BsonSymbol,
    BsonInt32,
    BsonTimestamp,
    BsonInt64,
]

# element types that exist on the wire but have no generic value
NO_GENERIC_VALUE_TYPES: frozenset[BsonType] = frozenset({
    BsonType.DB_POINTER,
    BsonType.JAVASCRIPT_WITH_SCOPE,
    BsonType.DECIMAL128,
    BsonType.MIN_KEY,
    BsonType.MAX_KEY,
})


def read_value(reader: BsonReader) -> BsonValue:
    """Read the value of the reader's current element, documents and arrays are read whole."""
    match reader.current_type:
        case BsonType.DOUBLE:
            return BsonDouble(reader.read_double())
        case BsonType.STRING:
            return BsonString(reader.read_string())
        case BsonType.DOCUMENT:
            return _read_document(reader)
        case BsonType.ARRAY:
            return _read_array(reader)
        case BsonType.BINARY:
            data, subtype = reader.read_binary()
            return BsonBinary(data, subtype)
        case BsonType.UNDEFINED:
            return BsonUndefined()
        case BsonType.OBJECT_ID:
            return BsonObjectId(reader.read_object_id())
        case BsonType.BOOLEAN:
            return BsonBoolean(reader.read_boolean())
        case BsonType.DATETIME:
            return BsonDateTime(reader.read_datetime())
        case BsonType.NULL:
            return BsonNull()
        case BsonType.REGEX:
            pattern, options = reader.read_regex()
            return BsonRegex(pattern, options)
        case BsonType.JAVASCRIPT:
            return BsonJavaScript(reader.read_javascript())
        case BsonType.SYMBOL:
            return BsonSymbol(reader.read_symbol())
        case BsonType.INT32:
            return BsonInt32(reader.read_int32())
        case BsonType.TIMESTAMP:
            increment, seconds = reader.read_timestamp()
            return BsonTimestamp(increment, seconds)
        case BsonType.INT64:
            return BsonInt64(reader.read_int64())
        case None:
            raise InvalidOperationError('there is no current element, call read() first')
        case unsupported if unsupported in NO_GENERIC_VALUE_TYPES:
            raise UnsupportedTypeError(f'unsupported type: {type_name(unsupported)}')
        case unknown:
            raise UnknownTypeError(f'unknown element type: {type_name(unknown)}')


def _read_document(reader: BsonReader) -> BsonDocument:
    elements: dict[str, BsonValue] = {}
    reader.start_nested_document()
    while reader.read():
        name = reader.current_name
        elements[name] = read_value(reader)
    reader.end_document()
    return BsonDocument(elements)


def _read_array(reader: BsonReader) -> BsonArray:
    items: list[BsonValue] = []
    reader.start_array()
    while reader.read():
        items.append(read_value(reader))
    reader.end_document()
    return BsonArray(items)


def write_value(writer: BsonWriter, name: Optional[str], value: BsonValue) -> None:
    """Write `value` as an element, `name=None` makes it the next element of the enclosing array."""
    match value:
        case BsonDouble():
            writer.write_double(name, value.value)
        case BsonString():
            writer.write_string(name, value.value)
        case BsonDocument():
            if name is None:
                writer.start_nested_document()
            else:
                writer.start_document(name)
            for element_name, element in value.elements.items():
                write_value(writer, element_name, element)
            writer.end_document()
        case BsonArray():
            if name is None:
                writer.start_nested_array()
            else:
                writer.start_array(name)
            for item in value.items:
                write_value(writer, None, item)
            writer.end_array()
        case BsonBinary():
            writer.write_binary(name, value.data, value.subtype)
        case BsonUndefined():
            writer.write_undefined(name)
        case BsonObjectId():
            writer.write_object_id(name, value.value)
        case BsonBoolean():
            writer.write_boolean(name, value.value)
        case BsonDateTime():
            writer.write_datetime(name, value.value)
        case BsonNull():
            writer.write_null(name)
        case BsonRegex():
            writer.write_regex(name, value.pattern, value.options)
        case BsonJavaScript():
            writer.write_javascript(name, value.code)
        case BsonSymbol():
            writer.write_symbol(name, value.value)
        case BsonInt32():
            writer.write_int32(name, value.value)
        case BsonTimestamp():
            writer.write_timestamp(name, value.increment, value.seconds)
        case BsonInt64():
            writer.write_int64(name, value.value)
        case _:
            assert_never(value)


def encode_document(document: BsonDocument, *, settings: Optional[CodecSettings] = None) -> bytes:
    """Encode a whole top-level document."""
    with BsonWriter(settings=settings) as writer:
        writer.start_document()
        for name, element in document.elements.items():
            write_value(writer, name, element)
        writer.end_document()
        return writer.getvalue()


def decode_document(data: Buffer, *, settings: Optional[CodecSettings] = None) -> BsonDocument:
    """Decode a whole top-level document, trailing bytes after it are an error."""
    elements: dict[str, BsonValue] = {}
    with BsonReader.from_bytes(data, settings=settings) as reader:
        reader.start_document()
        while reader.read():
            name = reader.current_name
            elements[name] = read_value(reader)
        reader.end_document()
        reader.deserializer.finalize()
    return BsonDocument(elements)


def to_python(value: BsonValue) -> Any:
    """Unwrap a value tree into plain python objects.

    Null and undefined become None, binary data becomes its bytes (the subtype is dropped), regexes become a
    (pattern, options) tuple and timestamps an (increment, seconds) tuple.
    """
    match value:
        case BsonDocument():
            return {name: to_python(element) for name, element in value.elements.items()}
        case BsonArray():
            return [to_python(item) for item in value.items]
        case BsonNull() | BsonUndefined():
            return None
        case BsonBinary():
            return value.data
        case BsonRegex():
            return value.pattern, value.options
        case BsonTimestamp():
            return value.increment, value.seconds
        case BsonJavaScript():
            return value.code
        case (BsonDouble() | BsonString() | BsonObjectId() | BsonBoolean() | BsonDateTime() | BsonSymbol()
              | BsonInt32() | BsonInt64()):
            return value.value
        case _:
            assert_never(value)
