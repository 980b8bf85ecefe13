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

import os
from typing import BinaryIO

from typing_extensions import override

from .deserializer import Deserializer
from .exceptions import BadDataError, InvalidArgumentError, OutOfDataError, SerializationError


class StreamDeserializer(Deserializer):
    """Implementation of Deserializer that reads from an already open, seekable, binary stream.

    The size of the stream is taken once at construction, data appended to the stream afterwards is not seen.
    """

    def __init__(self, stream: BinaryIO, *, leave_open: bool = False) -> None:
        if not stream.seekable():
            raise InvalidArgumentError('stream must be seekable')
        self._stream = stream
        self._leave_open = leave_open
        self._closed = False
        start = stream.tell()
        self._size = stream.seek(0, os.SEEK_END)
        stream.seek(start, os.SEEK_SET)

    @property
    def stream(self) -> BinaryIO:
        return self._stream

    def _remaining(self) -> int:
        return self._size - self._stream.tell()

    @override
    def finalize(self) -> None:
        if not self.is_empty():
            raise BadDataError('trailing data')

    @override
    def cur_pos(self) -> int:
        return self._stream.tell()

    @override
    def is_empty(self) -> bool:
        return self._remaining() <= 0

    @override
    def peek_byte(self) -> int:
        b = self.read_byte()
        self._stream.seek(-1, os.SEEK_CUR)
        return b

    @override
    def read_byte(self) -> int:
        data = self._stream.read(1)
        if not data:
            raise OutOfDataError('not enough bytes to read')
        return data[0]

    @override
    def _read_bytes(self, n: int) -> memoryview:
        if n < 0:
            raise SerializationError('value cannot be negative')
        if n > self._remaining():
            raise OutOfDataError('not enough bytes to read')
        data = self._stream.read(n)
        if len(data) != n:
            raise OutOfDataError('not enough bytes to read')
        return memoryview(data)

    @override
    def skip(self, n: int) -> None:
        if n < 0:
            raise SerializationError('value cannot be negative')
        if n > self._remaining():
            raise OutOfDataError('not enough bytes to skip')
        self._stream.seek(n, os.SEEK_CUR)

    @override
    def read_all(self) -> memoryview:
        return memoryview(self._stream.read())

    @override
    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if not self._leave_open and not self._stream.closed:
            self._stream.close()
