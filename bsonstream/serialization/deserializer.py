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

from .consts import DEFAULT_BYTES_MAX_LENGTH
from .exceptions import TooLongError
from .types import Buffer

if TYPE_CHECKING:
    from .bytes_deserializer import BytesDeserializer
    from .stream_deserializer import StreamDeserializer


class Deserializer(ABC):
    """Forward-only byte source."""

    @staticmethod
    def build_bytes_deserializer(data: Buffer) -> BytesDeserializer:
        from .bytes_deserializer import BytesDeserializer
        return BytesDeserializer(data)

    @staticmethod
    def build_stream_deserializer(stream: BinaryIO, *, leave_open: bool = False) -> StreamDeserializer:
        from .stream_deserializer import StreamDeserializer
        return StreamDeserializer(stream, leave_open=leave_open)

    @abstractmethod
    def finalize(self) -> None:
        """Check that all of the data was consumed, errors with trailing data."""
        raise NotImplementedError

    @abstractmethod
    def cur_pos(self) -> int:
        raise NotImplementedError

    @abstractmethod
    def is_empty(self) -> bool:
        raise NotImplementedError

    @abstractmethod
    def peek_byte(self) -> int:
        """Read a single byte but don't consume from buffer."""
        raise NotImplementedError

    @abstractmethod
    def read_byte(self) -> int:
        """Read a single byte as unsigned int."""
        raise NotImplementedError

    @abstractmethod
    def _read_bytes(self, n: int) -> memoryview:
        # XXX: it is recommended that implementors of Deserializer specialize this implementation
        return memoryview(bytes(self.read_byte() for _ in range(n)))

    @abstractmethod
    def skip(self, n: int) -> None:
        """Move the cursor `n` bytes forward without reading them, errors if there isn't enough data."""
        raise NotImplementedError

    @abstractmethod
    def read_all(self) -> memoryview:
        """Read all bytes until the reader is empty."""
        raise NotImplementedError

    @final
    def read_bytes(self, n: int, *, max_bytes: int | None = DEFAULT_BYTES_MAX_LENGTH) -> memoryview:
        """Read n bytes, errors if there isn't enough data"""
        if max_bytes is not None and n > max_bytes:
            raise TooLongError('requested length exceeds maximum length')
        return self._read_bytes(n)

    def read_struct(self, format: str) -> tuple[Any, ...]:
        size = struct.calcsize(format)
        data = self._read_bytes(size)
        return struct.unpack_from(format, data)

    def close(self) -> None:
        """Release any resource held by this deserializer, the default is to hold nothing."""
        pass
