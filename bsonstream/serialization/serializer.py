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

import struct
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, BinaryIO, final

from .consts import DEFAULT_BYTES_MAX_LENGTH, INT32_MAX, INT32_MIN
from .exceptions import InvalidArgumentError, TooLongError
from .types import Buffer

if TYPE_CHECKING:
    from .bytes_serializer import BytesSerializer
    from .stream_serializer import StreamSerializer


class Serializer(ABC):
    """Append-only byte sink.

    The only operation that touches bytes behind the cursor is `patch_int32_at`, which exists so a document's length
    prefix can be filled in once the document is closed.
    """

    @staticmethod
    def build_bytes_serializer() -> BytesSerializer:
        from .bytes_serializer import BytesSerializer
        return BytesSerializer()

    @staticmethod
    def build_stream_serializer(stream: BinaryIO, *, leave_open: bool = False) -> StreamSerializer:
        from .stream_serializer import StreamSerializer
        return StreamSerializer(stream, leave_open=leave_open)

    @abstractmethod
    def finalize(self) -> Buffer:
        """Get the resulting byte sequence."""
        raise NotImplementedError

    @abstractmethod
    def cur_pos(self) -> int:
        raise NotImplementedError

    @abstractmethod
    def write_byte(self, data: int) -> None:
        """Write a single byte."""
        raise NotImplementedError

    @abstractmethod
    def _write_bytes(self, data: Buffer) -> None:
        # XXX: it is recommended that implementors of Serializer specialize this implementation
        for byte in memoryview(data).cast('B'):
            self.write_byte(byte)

    @abstractmethod
    def _patch_bytes(self, position: int, data: Buffer) -> None:
        """Overwrite already written bytes at `position` without moving the cursor."""
        raise NotImplementedError

    @final
    def write_bytes(self, data: Buffer, *, max_bytes: int | None = DEFAULT_BYTES_MAX_LENGTH) -> None:
        """Write a byte sequence.

        To avoid accidental big writes, there is a default limit on the length of data written per call, the limit can
        be removed with `max_bytes=None` or set to what is appropriate.
        """
        if max_bytes is not None and len(data) > max_bytes:
            raise TooLongError('result is too long')
        self._write_bytes(data)

    def write_struct(self, format: str, *values: Any) -> None:
        try:
            data = struct.pack(format, *values)
        except struct.error as e:
            raise InvalidArgumentError(f'cannot pack {values!r} as {format!r}') from e
        self._write_bytes(data)

    @final
    def patch_int32_at(self, position: int, value: int) -> None:
        """Overwrite the little-endian int32 at `position`, the cursor is left where it was."""
        if not (INT32_MIN <= value <= INT32_MAX):
            raise TooLongError(f'{value} does not fit a 32-bit length prefix')
        if position < 0 or position + 4 > self.cur_pos():
            raise InvalidArgumentError(f'cannot patch at {position}, only {self.cur_pos()} bytes were written')
        self._patch_bytes(position, struct.pack('<i', value))

    def close(self) -> None:
        """Release any resource held by this serializer, the default is to hold nothing."""
        pass
