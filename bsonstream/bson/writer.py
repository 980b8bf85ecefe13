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
from typing import BinaryIO, NamedTuple, Optional, Union
from uuid import UUID

from structlog import get_logger
from typing_extensions import Self

from bsonstream.bson.types import (
    DECIMAL128_SIZE,
    END_OF_DOCUMENT,
    OBJECT_ID_SIZE,
    BsonBinarySubType,
    BsonType,
    GuidByteOrder,
)
from bsonstream.conf.settings import CodecSettings
from bsonstream.serialization import Serializer
from bsonstream.serialization.consts import INT32_MAX, INT32_MIN, INT64_MAX, INT64_MIN, UINT32_MAX
from bsonstream.serialization.encoding.bool import encode_bool
from bsonstream.serialization.encoding.cstring import encode_cstring
from bsonstream.serialization.encoding.float import encode_double
from bsonstream.serialization.encoding.int import encode_int
from bsonstream.serialization.encoding.utc_datetime import encode_datetime
from bsonstream.serialization.encoding.utf8 import encode_utf8
from bsonstream.serialization.exceptions import InvalidArgumentError, InvalidOperationError, TooLongError
from bsonstream.serialization.types import Buffer

logger = get_logger()


class _DocumentFrame(NamedTuple):
    # offset of the 4-byte length placeholder
    start_position: int
    is_array: bool


class BsonWriter:
    """Forward-only writer of length-prefixed documents.

    Documents and arrays are opened and closed explicitly and must balance. Every scalar writer takes the element name
    first; passing `name=None` uses the index of the next element of the enclosing array instead ("0", "1", ...).

    >>> with BsonWriter() as writer:
    ...     writer.start_document()
    ...     writer.write_int32('a', 1)
    ...     writer.end_document()
    ...     writer.getvalue().hex()
    '0c0000001061000100000000'
    """

    def __init__(
        self,
        serializer: Optional[Serializer] = None,
        *,
        leave_open: bool = False,
        settings: Optional[CodecSettings] = None,
    ) -> None:
        if settings is None:
            from bsonstream.conf.get_settings import get_global_settings
            settings = get_global_settings()
        self.log = logger.new()
        self._settings = settings
        self._serializer = serializer if serializer is not None else Serializer.build_bytes_serializer()
        self._leave_open = leave_open
        self._closed = False
        self._frames: list[_DocumentFrame] = []
        self._array_index = 0
        self._array_index_stack: list[int] = []

    @classmethod
    def from_stream(
        cls,
        stream: BinaryIO,
        *,
        leave_open: bool = False,
        settings: Optional[CodecSettings] = None,
    ) -> BsonWriter:
        """Create a writer over an already open, seekable, binary stream.

        The stream is closed when the writer is closed, unless `leave_open=True`.
        """
        serializer = Serializer.build_stream_serializer(stream, leave_open=leave_open)
        return cls(serializer, settings=settings)

    @property
    def serializer(self) -> Serializer:
        return self._serializer

    @property
    def depth(self) -> int:
        return len(self._frames)

    @property
    def is_in_array(self) -> bool:
        return bool(self._frames) and self._frames[-1].is_array

    def getvalue(self) -> bytes:
        """The bytes written so far."""
        return bytes(self._serializer.finalize())

    # documents and arrays

    def start_document(self, name: Optional[str] = None) -> None:
        """Open a document.

        Without a name this opens a bare document (like the top-level one), with a name it writes a Document element
        and opens the embedded document as its value.
        """
        if name is not None:
            self._write_element_header(BsonType.DOCUMENT, name)
        self._push_frame(is_array=False)

    def end_document(self) -> None:
        """Close the innermost document, writing its terminator and patching its length prefix."""
        self._pop_frame(is_array=False)

    def start_array(self, name: str) -> None:
        """Write an Array element and open the embedded array, its elements are named from "0"."""
        self._write_element_header(BsonType.ARRAY, name)
        self._array_index_stack.append(self._array_index)
        self._array_index = 0
        self._push_frame(is_array=True)

    def end_array(self) -> None:
        """Close the innermost array, the index of the enclosing array is restored."""
        self._pop_frame(is_array=True)
        self._array_index = self._array_index_stack.pop()

    def start_nested_document(self) -> None:
        """Open a document as the next element of the enclosing array."""
        self.start_document(self._next_array_name())

    def start_nested_array(self) -> None:
        """Open an array as the next element of the enclosing array."""
        self.start_array(self._next_array_name())

    def _push_frame(self, *, is_array: bool) -> None:
        self._frames.append(_DocumentFrame(self._serializer.cur_pos(), is_array))
        # placeholder, patched by _pop_frame
        encode_int(self._serializer, 0, length=4, signed=True)

    def _pop_frame(self, *, is_array: bool) -> None:
        if not self._frames:
            raise InvalidOperationError('no document to end')
        frame = self._frames[-1]
        if frame.is_array != is_array:
            innermost = 'an array' if frame.is_array else 'a document'
            raise InvalidOperationError(f'cannot end {"array" if is_array else "document"}, '
                                        f'the innermost open frame is {innermost}')
        self._frames.pop()
        self._serializer.write_byte(END_OF_DOCUMENT)
        length = self._serializer.cur_pos() - frame.start_position
        if length > INT32_MAX:
            raise TooLongError(f'document is {length} bytes long, which does not fit its length prefix')
        self._serializer.patch_int32_at(frame.start_position, length)

    # element primitives

    def _next_array_name(self) -> str:
        name = str(self._array_index)
        self._array_index += 1
        return name

    def _write_element_header(self, type_: BsonType, name: Optional[str]) -> None:
        if name is None:
            name = self._next_array_name()
        self._serializer.write_byte(type_)
        encode_cstring(self._serializer, name)

    # scalar writers

    def write_null(self, name: Optional[str]) -> None:
        self._write_element_header(BsonType.NULL, name)

    def write_undefined(self, name: Optional[str]) -> None:
        self._write_element_header(BsonType.UNDEFINED, name)

    def write_min_key(self, name: Optional[str]) -> None:
        self._write_element_header(BsonType.MIN_KEY, name)

    def write_max_key(self, name: Optional[str]) -> None:
        self._write_element_header(BsonType.MAX_KEY, name)

    def write_boolean(self, name: Optional[str], value: bool) -> None:
        self._write_element_header(BsonType.BOOLEAN, name)
        encode_bool(self._serializer, bool(value))

    def write_int32(self, name: Optional[str], value: int) -> None:
        if not (INT32_MIN <= value <= INT32_MAX):
            raise InvalidArgumentError(f'{value} does not fit a signed 32-bit integer')
        self._write_element_header(BsonType.INT32, name)
        encode_int(self._serializer, value, length=4, signed=True)

    def write_int64(self, name: Optional[str], value: int) -> None:
        if not (INT64_MIN <= value <= INT64_MAX):
            raise InvalidArgumentError(f'{value} does not fit a signed 64-bit integer')
        self._write_element_header(BsonType.INT64, name)
        encode_int(self._serializer, value, length=8, signed=True)

    def write_double(self, name: Optional[str], value: float) -> None:
        self._write_element_header(BsonType.DOUBLE, name)
        encode_double(self._serializer, value)

    def write_string(self, name: Optional[str], value: str) -> None:
        self._write_element_header(BsonType.STRING, name)
        encode_utf8(self._serializer, value, max_bytes=self._settings.MAX_BYTES_PER_READ)

    def write_javascript(self, name: Optional[str], code: str) -> None:
        self._write_element_header(BsonType.JAVASCRIPT, name)
        encode_utf8(self._serializer, code, max_bytes=self._settings.MAX_BYTES_PER_READ)

    def write_symbol(self, name: Optional[str], value: str) -> None:
        self._write_element_header(BsonType.SYMBOL, name)
        encode_utf8(self._serializer, value, max_bytes=self._settings.MAX_BYTES_PER_READ)

    def write_datetime(self, name: Optional[str], value: datetime) -> None:
        """Write a datetime as UTC milliseconds since the Unix epoch, naive datetimes are taken as UTC."""
        self._write_element_header(BsonType.DATETIME, name)
        encode_datetime(self._serializer, value)

    def write_object_id(self, name: Optional[str], value: Buffer) -> None:
        if len(value) != OBJECT_ID_SIZE:
            raise InvalidArgumentError(f'ObjectId must be exactly {OBJECT_ID_SIZE} bytes, got {len(value)}')
        self._write_element_header(BsonType.OBJECT_ID, name)
        self._serializer.write_bytes(value)

    def write_decimal128(self, name: Optional[str], value: Buffer) -> None:
        """Write the 16 raw bytes of an IEEE 754-2008 decimal128, no conversion is done."""
        if len(value) != DECIMAL128_SIZE:
            raise InvalidArgumentError(f'Decimal128 must be exactly {DECIMAL128_SIZE} bytes, got {len(value)}')
        self._write_element_header(BsonType.DECIMAL128, name)
        self._serializer.write_bytes(value)

    def write_binary(
        self,
        name: Optional[str],
        value: Buffer,
        subtype: Union[BsonBinarySubType, int] = BsonBinarySubType.GENERIC,
    ) -> None:
        """Write binary data.

        Layout: [N: int32][subtype: byte][N bytes]. The legacy BINARY_OLD subtype repeats the length inside the payload:
        [N+4: int32][0x02][N: int32][N bytes].
        """
        if not (0 <= subtype <= 0xFF):
            raise InvalidArgumentError(f'binary subtype must fit in a byte, got {subtype}')
        data = memoryview(value).cast('B')
        max_bytes = self._settings.MAX_BYTES_PER_READ
        self._write_element_header(BsonType.BINARY, name)
        if subtype == BsonBinarySubType.BINARY_OLD:
            encode_int(self._serializer, len(data) + 4, length=4, signed=True)
            self._serializer.write_byte(subtype)
            encode_int(self._serializer, len(data), length=4, signed=True)
        else:
            encode_int(self._serializer, len(data), length=4, signed=True)
            self._serializer.write_byte(subtype)
        self._serializer.write_bytes(data, max_bytes=max_bytes)

    def write_guid(self, name: Optional[str], value: UUID) -> None:
        """Write a UUID as 16 bytes of binary data with the UUID subtype.

        The byte layout follows the GUID_BYTE_ORDER setting: `little_endian` (the default) is the .NET Guid layout,
        `standard` is the RFC 4122 big-endian layout.
        """
        if self._settings.GUID_BYTE_ORDER is GuidByteOrder.LITTLE_ENDIAN:
            data = value.bytes_le
        else:
            data = value.bytes
        self.write_binary(name, data, BsonBinarySubType.UUID)

    def write_regex(self, name: Optional[str], pattern: str, options: str = '') -> None:
        self._write_element_header(BsonType.REGEX, name)
        encode_cstring(self._serializer, pattern)
        encode_cstring(self._serializer, options)

    def write_timestamp(self, name: Optional[str], increment: int, seconds: int) -> None:
        """Write an internal timestamp: the increment comes first, then the seconds, both unsigned 32-bit."""
        for value in (increment, seconds):
            if not (0 <= value <= UINT32_MAX):
                raise InvalidArgumentError(f'{value} does not fit an unsigned 32-bit integer')
        self._write_element_header(BsonType.TIMESTAMP, name)
        encode_int(self._serializer, increment, length=4, signed=False)
        encode_int(self._serializer, seconds, length=4, signed=False)

    # scoped acquisition

    def close(self) -> None:
        """Release the writer, the underlying serializer is closed unless `leave_open=True`."""
        if self._closed:
            return
        self._closed = True
        if self._frames:
            self.log.debug('writer closed with open documents', depth=len(self._frames))
        if not self._leave_open:
            self._serializer.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: Union[type[BaseException], None],
        exc_value: Union[BaseException, None],
        traceback: Union[TracebackType, None],
    ) -> None:
        self.close()
