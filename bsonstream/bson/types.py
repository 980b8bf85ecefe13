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

"""
Element type tags, binary subtypes and the numeric coercion rules used when an element is read as a different numeric
type than it was written.

>>> to_int32(4_294_967_296)
0
>>> to_int32(2**31)
-2147483648
>>> to_int32(3.9)
3
>>> to_int32(-3.9)
-3
>>> to_double(2**53 + 1)
9007199254740992.0
"""

import math
from enum import Enum, IntEnum, unique
from typing import Union

from bsonstream.serialization.exceptions import BadDataError


@unique
class BsonType(IntEnum):
    DOUBLE = 0x01
    STRING = 0x02
    DOCUMENT = 0x03
    ARRAY = 0x04
    BINARY = 0x05
    UNDEFINED = 0x06  # deprecated
    OBJECT_ID = 0x07
    BOOLEAN = 0x08
    DATETIME = 0x09
    NULL = 0x0A
    REGEX = 0x0B
    DB_POINTER = 0x0C  # deprecated
    JAVASCRIPT = 0x0D
    SYMBOL = 0x0E  # deprecated
    JAVASCRIPT_WITH_SCOPE = 0x0F  # deprecated
    INT32 = 0x10
    TIMESTAMP = 0x11
    INT64 = 0x12
    DECIMAL128 = 0x13
    MIN_KEY = 0xFF
    MAX_KEY = 0x7F


@unique
class BsonBinarySubType(IntEnum):
    GENERIC = 0x00
    FUNCTION = 0x01
    BINARY_OLD = 0x02  # deprecated, carries an inner length prefix
    UUID_OLD = 0x03  # deprecated
    UUID = 0x04
    MD5 = 0x05
    ENCRYPTED = 0x06
    COMPRESSED_TIME_SERIES = 0x07
    USER_DEFINED = 0x80


class GuidByteOrder(str, Enum):
    # RFC 4122 field order, what `uuid.UUID.bytes` gives
    STANDARD = 'standard'
    # first three fields little-endian, what `uuid.UUID.bytes_le` gives
    LITTLE_ENDIAN = 'little_endian'


# sentinel stored in the byte stream where a document ends
END_OF_DOCUMENT: int = 0x00

# smallest possible document: int32 length + terminator
MIN_DOCUMENT_SIZE: int = 5

OBJECT_ID_SIZE: int = 12
DECIMAL128_SIZE: int = 16
GUID_SIZE: int = 16

NUMERIC_TYPES: frozenset[BsonType] = frozenset({BsonType.INT32, BsonType.INT64, BsonType.DOUBLE})
STRING_TYPES: frozenset[BsonType] = frozenset({BsonType.STRING, BsonType.JAVASCRIPT, BsonType.SYMBOL})

_BSON_TYPE_VALUES = frozenset(t.value for t in BsonType)
_BINARY_SUBTYPE_VALUES = frozenset(t.value for t in BsonBinarySubType)


def element_type_from_byte(tag: int) -> Union[BsonType, int]:
    """The `BsonType` for a tag byte, unknown tags are returned as plain ints."""
    if tag in _BSON_TYPE_VALUES:
        return BsonType(tag)
    return tag


def binary_subtype_from_byte(subtype: int) -> Union[BsonBinarySubType, int]:
    """The `BsonBinarySubType` for a subtype byte, anything else (user defined included) is returned as a plain int.

    >>> binary_subtype_from_byte(0x04)
    <BsonBinarySubType.UUID: 4>
    >>> binary_subtype_from_byte(0x85)
    133
    """
    if subtype in _BINARY_SUBTYPE_VALUES:
        return BsonBinarySubType(subtype)
    return subtype


def is_user_defined_subtype(subtype: int) -> bool:
    return subtype >= BsonBinarySubType.USER_DEFINED


def type_name(tag: int) -> str:
    if tag in _BSON_TYPE_VALUES:
        return BsonType(tag).name
    return f'0x{tag:02x}'


def _wrap(value: int, bits: int) -> int:
    mask = (1 << bits) - 1
    value &= mask
    if value >> (bits - 1):
        value -= 1 << bits
    return value


def _truncate(value: float, target: str) -> int:
    if math.isnan(value) or math.isinf(value):
        raise BadDataError(f'{value} cannot be read as {target}')
    return int(value)


def to_int32(value: Union[int, float]) -> int:
    """Narrow a stored numeric value to a signed 32-bit integer, keeping the low 32 bits."""
    if isinstance(value, float):
        value = _truncate(value, 'INT32')
    return _wrap(value, 32)


def to_int64(value: Union[int, float]) -> int:
    """Narrow a stored numeric value to a signed 64-bit integer, keeping the low 64 bits."""
    if isinstance(value, float):
        value = _truncate(value, 'INT64')
    return _wrap(value, 64)


def to_double(value: Union[int, float]) -> float:
    """Widen a stored numeric value to a double, rounding to the nearest representable value."""
    return float(value)
