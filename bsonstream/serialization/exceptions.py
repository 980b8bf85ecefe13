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


class SerializationError(Exception):
    """Base class for every error raised while encoding or decoding."""
    pass


class BadDataError(SerializationError, ValueError):
    """Raised when the input bytes are not well-formed."""
    pass


class OutOfDataError(BadDataError):
    """Raised when a read needs more bytes than the source has left."""
    pass


class TooLongError(SerializationError):
    """Raised when a write or read exceeds the configured maximum length."""
    pass


class InvalidOperationError(SerializationError):
    """Raised when an operation is not valid for the current state of a reader or writer.

    For example: ending a document that was never started, or reading a value as a type that is not accepted for the
    current element.
    """
    pass


class InvalidArgumentError(SerializationError, ValueError):
    """Raised when a value cannot be encoded, like an ObjectId that isn't exactly 12 bytes."""
    pass


class UnsupportedTypeError(SerializationError):
    """Raised when an element type has no mapping for the requested operation."""
    pass


class UnknownTypeError(BadDataError, UnsupportedTypeError):
    """Raised when an element carries a type tag that isn't part of the format at all."""
    pass
