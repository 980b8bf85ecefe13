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

from bsonstream.bson import (
    BsonBinarySubType,
    BsonDocument,
    BsonReader,
    BsonType,
    BsonValue,
    BsonWriter,
    GuidByteOrder,
    decode_document,
    encode_document,
    to_python,
)
from bsonstream.conf.settings import CodecSettings
from bsonstream.serialization.exceptions import (
    BadDataError,
    InvalidArgumentError,
    InvalidOperationError,
    OutOfDataError,
    SerializationError,
    TooLongError,
    UnknownTypeError,
    UnsupportedTypeError,
)
from bsonstream.version import __version__

__all__ = [
    'BsonReader',
    'BsonWriter',
    'BsonType',
    'BsonBinarySubType',
    'BsonDocument',
    'BsonValue',
    'GuidByteOrder',
    'CodecSettings',
    'decode_document',
    'encode_document',
    'to_python',
    'SerializationError',
    'BadDataError',
    'OutOfDataError',
    'TooLongError',
    'InvalidOperationError',
    'InvalidArgumentError',
    'UnsupportedTypeError',
    'UnknownTypeError',
    '__version__',
]
