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

from typing_extensions import override

from .deserializer import Deserializer
from .exceptions import BadDataError, OutOfDataError, SerializationError
from .types import Buffer


class BytesDeserializer(Deserializer):
    """Simple implementation of a Deserializer to parse values from a byte sequence.

    This implementation keeps the whole memoryview and an offset into it, so positions are absolute offsets into the
    original buffer.
    """

    def __init__(self, data: Buffer) -> None:
        self._view = memoryview(data).cast('B')
        self._pos = 0

    @override
    def finalize(self) -> None:
        if not self.is_empty():
            raise BadDataError('trailing data')

    @override
    def cur_pos(self) -> int:
        return self._pos

    @override
    def is_empty(self) -> bool:
        return self._pos >= len(self._view)

    @override
    def peek_byte(self) -> int:
        if self.is_empty():
            raise OutOfDataError('not enough bytes to read')
        return self._view[self._pos]

    @override
    def read_byte(self) -> int:
        b = self.peek_byte()
        self._pos += 1
        return b

    @override
    def _read_bytes(self, n: int) -> memoryview:
        if n < 0:
            raise SerializationError('value cannot be negative')
        end = self._pos + n
        if end > len(self._view):
            raise OutOfDataError('not enough bytes to read')
        b = self._view[self._pos:end]
        self._pos = end
        return b

    @override
    def skip(self, n: int) -> None:
        self._read_bytes(n)

    @override
    def read_all(self) -> memoryview:
        b = self._view[self._pos:]
        self._pos = len(self._view)
        return b
