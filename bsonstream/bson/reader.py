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

from __future__ import annotations

from datetime import datetime
from types import TracebackType
from typing import TYPE_CHECKING, BinaryIO, NamedTuple, Optional, Union
from uuid import UUID

from structlog import get_logger
from typing_extensions import Self

from bsonstream.bson.types import (
    DECIMAL128_SIZE,
    END_OF_DOCUMENT,
    GUID_SIZE,
    MIN_DOCUMENT_SIZE,
    NUMERIC_TYPES,
    OBJECT_ID_SIZE,
    STRING_TYPES,
    BsonBinarySubType,
    BsonType,
    GuidByteOrder,
    binary_subtype_from_byte,
    element_type_from_byte,
    to_double,
    to_int32,
    to_int64,
    type_name,
)
from bsonstream.conf.settings import CodecSettings
from bsonstream.serialization import Deserializer
from bsonstream.serialization.encoding.bool import decode_bool
from bsonstream.serialization.encoding.cstring import decode_cstring
from bsonstream.serialization.encoding.float import decode_double
from bsonstream.serialization.encoding.int import decode_int
from bsonstream.serialization.encoding.utc_datetime import decode_datetime
from bsonstream.serialization.encoding.utf8 import decode_utf8
from bsonstream.serialization.exceptions import (
    BadDataError,
    InvalidArgumentError,
    InvalidOperationError,
    UnknownTypeError,
)
from bsonstream.serialization.types import Buffer

if TYPE_CHECKING:
    from bsonstream.bson.value import BsonValue

logger = get_logger()


class _DocumentFrame(NamedTuple):
    # absolute offset one past the terminator
    end_position: int
    is_array: bool


class BsonReader:
    """Forward-only reader of length-prefixed documents.

    Elements are pulled one at a time: `read()` moves to the next element and exposes its name and type, then the
    caller must consume the value with one of the `read_*` methods or with `skip()` before calling `read()` again.
    Stopping early is fine, `end_document()` jumps over whatever was left unread.

    >>> reader = BsonReader.from_bytes(bytes.fromhex('0c0000001061000100000000'))
    >>> reader.start_document()
    >>> reader.read(), reader.current_name, reader.current_type
    (True, 'a', <BsonType.INT32: 16>)
    >>> reader.read_int32()
    1
    >>> reader.read()
    False
    >>> reader.end_document()
    """

    def __init__(
        self,
        deserializer: Deserializer,
        *,
        leave_open: bool = False,
        settings: Optional[CodecSettings] = None,
    ) -> None:
        if settings is None:
            from bsonstream.conf.get_settings import get_global_settings
            settings = get_global_settings()
        self.log = logger.new()
        self._settings = settings
        self._deserializer = deserializer
        self._leave_open = leave_open
        self._closed = False
        self._frames: list[_DocumentFrame] = []
        self._current_type: Union[BsonType, int, None] = None
        self._current_name: str = ''

    @classmethod
    def from_bytes(cls, data: Buffer, *, settings: Optional[CodecSettings] = None) -> BsonReader:
        return cls(Deserializer.build_bytes_deserializer(data), settings=settings)

    @classmethod
    def from_stream(
        cls,
        stream: BinaryIO,
        *,
        leave_open: bool = False,
        settings: Optional[CodecSettings] = None,
    ) -> BsonReader:
        """Create a reader over an already open, seekable, binary stream.

        The stream is closed when the reader is closed, unless `leave_open=True`.
        """
        deserializer = Deserializer.build_stream_deserializer(stream, leave_open=leave_open)
        return cls(deserializer, settings=settings)

    @property
    def deserializer(self) -> Deserializer:
        return self._deserializer

    @property
    def current_type(self) -> Union[BsonType, int, None]:
        """Type of the element read by the last `read()`, None when there is no current element.

        Tags that aren't part of the format are kept as plain ints, they only fail once the value is consumed.
        """
        return self._current_type

    @property
    def current_name(self) -> str:
        return self._current_name

    @property
    def depth(self) -> int:
        return len(self._frames)

    @property
    def is_in_array(self) -> bool:
        return bool(self._frames) and self._frames[-1].is_array

    # documents and arrays

    def start_document(self) -> None:
        """Read the length prefix of a bare document (like the top-level one) and enter it."""
        self._push_frame(is_array=False)

    def start_nested_document(self) -> None:
        """Enter the embedded document that is the value of the current element."""
        self._ensure_type(BsonType.DOCUMENT)
        self._push_frame(is_array=False)

    def start_array(self) -> None:
        """Enter the array that is the value of the current element."""
        self._ensure_type(BsonType.ARRAY)
        self._push_frame(is_array=True)

    def end_document(self) -> None:
        """Leave the innermost document or array, skipping any element that was not read."""
        if not self._frames:
            raise InvalidOperationError('no document to end')
        frame = self._frames.pop()
        self._clear_current()
        terminator_position = frame.end_position - 1
        pos = self._deserializer.cur_pos()
        if pos > terminator_position:
            self.log.debug('read past the end of the document', position=pos, end_position=frame.end_position)
            raise BadDataError(f'read past the end of the document at {terminator_position}, cursor is at {pos}')
        if pos < terminator_position:
            self._deserializer.skip(terminator_position - pos)
        end_marker = self._deserializer.read_byte()
        if end_marker != END_OF_DOCUMENT:
            self.log.debug('bad end of document marker', position=terminator_position, marker=end_marker)
            raise BadDataError(f'expected end of document marker (0x00), got 0x{end_marker:02X}')

    def _push_frame(self, *, is_array: bool) -> None:
        start = self._deserializer.cur_pos()
        length = decode_int(self._deserializer, length=4, signed=True)
        if not (MIN_DOCUMENT_SIZE <= length <= self._settings.MAX_DOCUMENT_SIZE):
            self.log.debug('bad document length', position=start, length=length)
            raise BadDataError(f'invalid document length {length} at {start}')
        end_position = start + length
        if self._frames and end_position > self._frames[-1].end_position - 1:
            self.log.debug('document overruns its parent', position=start, length=length)
            raise BadDataError(f'document at {start} with length {length} overruns its parent document')
        self._frames.append(_DocumentFrame(end_position, is_array))
        self._clear_current()

    # elements

    def read(self) -> bool:
        """Move to the next element, returns False when there are no more elements in the current document."""
        if not self._frames:
            raise InvalidOperationError('not inside a document, call start_document() first')
        frame = self._frames[-1]
        terminator_position = frame.end_position - 1
        if self._deserializer.cur_pos() >= terminator_position:
            self._clear_current()
            return False
        tag = self._deserializer.read_byte()
        if tag == END_OF_DOCUMENT:
            self._clear_current()
            return False
        self._current_type = element_type_from_byte(tag)
        self._current_name = decode_cstring(self._deserializer)
        if self._deserializer.cur_pos() > terminator_position:
            raise BadDataError(f'element name {self._current_name!r} runs past the end of the document')
        return True

    def _clear_current(self) -> None:
        self._current_type = None
        self._current_name = ''

    def _ensure_type(self, *expected_types: BsonType) -> BsonType:
        if not self._frames:
            raise InvalidOperationError('not inside a document, call start_document() first')
        current = self._current_type
        if current is None:
            raise InvalidOperationError('there is no current element, call read() first')
        if current in expected_types:
            assert isinstance(current, BsonType)
            return current
        if len(expected_types) == 1:
            raise InvalidOperationError(f'expected {expected_types[0].name}, but current type is {type_name(current)}')
        expected = ', '.join(t.name for t in expected_types)
        raise InvalidOperationError(f'expected one of [{expected}], but current type is {type_name(current)}')

    # typed readers

    def read_boolean(self) -> bool:
        self._ensure_type(BsonType.BOOLEAN)
        return decode_bool(self._deserializer)

    def _read_number(self) -> Union[int, float]:
        match self._ensure_type(*NUMERIC_TYPES):
            case BsonType.INT32:
                return decode_int(self._deserializer, length=4, signed=True)
            case BsonType.INT64:
                return decode_int(self._deserializer, length=8, signed=True)
            case BsonType.DOUBLE:
                return decode_double(self._deserializer)
            case _:
                raise InvalidOperationError

    def read_int32(self) -> int:
        """Read an INT32, INT64 or DOUBLE element as a signed 32-bit integer.

        Wider integers keep their low 32 bits and doubles are truncated toward zero.
        """
        return to_int32(self._read_number())

    def read_int64(self) -> int:
        """Read an INT32, INT64 or DOUBLE element as a signed 64-bit integer, doubles are truncated toward zero."""
        return to_int64(self._read_number())

    def read_double(self) -> float:
        """Read an INT32, INT64 or DOUBLE element as a double."""
        return to_double(self._read_number())

    def _read_utf8(self) -> str:
        return decode_utf8(self._deserializer, max_bytes=self._settings.MAX_BYTES_PER_READ)

    def read_string(self) -> str:
        """Read a STRING element, JAVASCRIPT and SYMBOL share the same layout and are accepted too."""
        self._ensure_type(*STRING_TYPES)
        return self._read_utf8()

    def read_javascript(self) -> str:
        self._ensure_type(BsonType.JAVASCRIPT)
        return self._read_utf8()

    def read_symbol(self) -> str:
        self._ensure_type(BsonType.SYMBOL)
        return self._read_utf8()

    def read_datetime(self) -> datetime:
        """Read a DATETIME element as an aware datetime in UTC."""
        self._ensure_type(BsonType.DATETIME)
        return decode_datetime(self._deserializer)

    def read_object_id(self) -> bytes:
        self._ensure_type(BsonType.OBJECT_ID)
        return bytes(self._deserializer.read_bytes(OBJECT_ID_SIZE))

    def read_object_id_into(self, destination: Union[bytearray, memoryview]) -> None:
        """Read an OBJECT_ID element into the first 12 bytes of `destination`."""
        self._ensure_type(BsonType.OBJECT_ID)
        if len(destination) < OBJECT_ID_SIZE:
            raise InvalidArgumentError(f'destination must be at least {OBJECT_ID_SIZE} bytes')
        destination[:OBJECT_ID_SIZE] = self._deserializer.read_bytes(OBJECT_ID_SIZE)

    def read_decimal128(self) -> bytes:
        """Read the 16 raw bytes of a DECIMAL128 element."""
        self._ensure_type(BsonType.DECIMAL128)
        return bytes(self._deserializer.read_bytes(DECIMAL128_SIZE))

    def read_binary(self) -> tuple[bytes, Union[BsonBinarySubType, int]]:
        """Read a BINARY element, returns the data and its subtype.

        For the legacy BINARY_OLD subtype the inner length prefix decides how many bytes are read.
        """
        self._ensure_type(BsonType.BINARY)
        length = decode_int(self._deserializer, length=4, signed=True)
        if length < 0:
            raise BadDataError(f'invalid binary length {length}')
        subtype = self._deserializer.read_byte()
        if subtype == BsonBinarySubType.BINARY_OLD:
            length = decode_int(self._deserializer, length=4, signed=True)
            if length < 0:
                raise BadDataError(f'invalid inner binary length {length}')
        data = bytes(self._deserializer.read_bytes(length, max_bytes=self._settings.MAX_BYTES_PER_READ))
        return data, binary_subtype_from_byte(subtype)

    def read_guid(self) -> UUID:
        """Read a binary element holding a UUID, in the byte layout of the GUID_BYTE_ORDER setting."""
        data, _ = self.read_binary()
        if len(data) != GUID_SIZE:
            raise BadDataError(f'expected {GUID_SIZE} bytes for a GUID, got {len(data)}')
        if self._settings.GUID_BYTE_ORDER is GuidByteOrder.LITTLE_ENDIAN:
            return UUID(bytes_le=data)
        return UUID(bytes=data)

    def read_regex(self) -> tuple[str, str]:
        """Read a REGEX element, returns the pattern and the options."""
        self._ensure_type(BsonType.REGEX)
        pattern = decode_cstring(self._deserializer)
        options = decode_cstring(self._deserializer)
        return pattern, options

    def read_timestamp(self) -> tuple[int, int]:
        """Read a TIMESTAMP element, returns the increment and the seconds."""
        self._ensure_type(BsonType.TIMESTAMP)
        increment = decode_int(self._deserializer, length=4, signed=False)
        seconds = decode_int(self._deserializer, length=4, signed=False)
        return increment, seconds

    def read_db_pointer(self) -> tuple[str, bytes]:
        """Read a DB_POINTER element, returns the namespace and the 12 bytes of the ObjectId."""
        self._ensure_type(BsonType.DB_POINTER)
        namespace = self._read_utf8()
        return namespace, bytes(self._deserializer.read_bytes(OBJECT_ID_SIZE))

    def read_value(self) -> BsonValue:
        """Read the current element as a generic value, recursing into documents and arrays."""
        from bsonstream.bson.value import read_value
        return read_value(self)

    def skip(self) -> None:
        """Move past the value of the current element without interpreting it."""
        if not self._frames:
            raise InvalidOperationError('not inside a document, call start_document() first')
        if self._current_type is None:
            raise InvalidOperationError('there is no current element, call read() first')
        de = self._deserializer
        match self._current_type:
            case BsonType.DOUBLE | BsonType.DATETIME | BsonType.TIMESTAMP | BsonType.INT64:
                de.skip(8)
            case BsonType.INT32:
                de.skip(4)
            case BsonType.STRING | BsonType.JAVASCRIPT | BsonType.SYMBOL:
                de.skip(self._read_length(minimum=1))
            case BsonType.DOCUMENT | BsonType.ARRAY:
                de.skip(self._read_length(minimum=MIN_DOCUMENT_SIZE) - 4)
            case BsonType.JAVASCRIPT_WITH_SCOPE:
                de.skip(self._read_length(minimum=4) - 4)
            case BsonType.BINARY:
                # subtype + data
                de.skip(1 + self._read_length(minimum=0))
            case BsonType.OBJECT_ID:
                de.skip(OBJECT_ID_SIZE)
            case BsonType.BOOLEAN:
                de.skip(1)
            case BsonType.NULL | BsonType.UNDEFINED | BsonType.MIN_KEY | BsonType.MAX_KEY:
                pass
            case BsonType.REGEX:
                decode_cstring(de)
                decode_cstring(de)
            case BsonType.DECIMAL128:
                de.skip(DECIMAL128_SIZE)
            case BsonType.DB_POINTER:
                de.skip(self._read_length(minimum=1))
                de.skip(OBJECT_ID_SIZE)
            case unknown:
                self.log.debug('cannot skip unknown type', type=unknown, name=self._current_name)
                raise UnknownTypeError(f'unknown element type: {type_name(unknown)}')

    def _read_length(self, *, minimum: int) -> int:
        length = decode_int(self._deserializer, length=4, signed=True)
        if length < minimum:
            raise BadDataError(f'invalid length prefix {length} for {type_name(self._current_type or 0)}')
        return length

    # scoped acquisition

    def close(self) -> None:
        """Release the reader, the underlying deserializer is closed unless `leave_open=True`."""
        if self._closed:
            return
        self._closed = True
        if not self._leave_open:
            self._deserializer.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: Union[type[BaseException], None],
        exc_value: Union[BaseException, None],
        traceback: Union[TracebackType, None],
    ) -> None:
        self.close()
