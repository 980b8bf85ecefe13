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

from .exceptions import InvalidArgumentError, InvalidOperationError
from .serializer import Serializer
from .types import Buffer


class StreamSerializer(Serializer):
    """Implementation of Serializer that writes to an already open, seekable, binary stream.

    Positions are absolute stream offsets. When `leave_open=True` the stream is flushed but not closed by `close()`.
    """

    def __init__(self, stream: BinaryIO, *, leave_open: bool = False) -> None:
        if not stream.seekable():
            raise InvalidArgumentError('stream must be seekable')
        self._stream = stream
        self._leave_open = leave_open
        self._start = stream.tell()
        self._closed = False

    @property
    def stream(self) -> BinaryIO:
        return self._stream

    @override
    def finalize(self) -> memoryview:
        """Read back everything written since this serializer was created, requires a readable stream."""
        self._stream.flush()
        if not self._stream.readable():
            raise InvalidOperationError('stream is not readable')
        end = self._stream.tell()
        self._stream.seek(self._start)
        data = self._stream.read(end - self._start)
        self._stream.seek(end)
        return memoryview(data)

    @override
    def cur_pos(self) -> int:
        return self._stream.tell()

    @override
    def write_byte(self, data: int) -> None:
        # int.to_bytes checks for correct range
        self._stream.write(int.to_bytes(data, 1, 'little'))

    @override
    def _write_bytes(self, data: Buffer) -> None:
        self._stream.write(data)

    @override
    def _patch_bytes(self, position: int, data: Buffer) -> None:
        end = self._stream.tell()
        self._stream.seek(position, os.SEEK_SET)
        self._stream.write(data)
        self._stream.seek(end, os.SEEK_SET)

    @override
    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._stream.closed:
            return
        self._stream.flush()
        if not self._leave_open:
            self._stream.close()
