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

from bsonstream.bson.reader import BsonReader
from bsonstream.bson.types import BsonBinarySubType, BsonType, GuidByteOrder
from bsonstream.bson.value import (
    BsonArray,
    BsonBinary,
    BsonBoolean,
    BsonDateTime,
    BsonDocument,
    BsonDouble,
    BsonInt32,
    BsonInt64,
    BsonJavaScript,
    BsonNull,
    BsonObjectId,
    BsonRegex,
    BsonString,
    BsonSymbol,
    BsonTimestamp,
    BsonUndefined,
    BsonValue,
    decode_document,
    encode_document,
    read_value,
    to_python,
    write_value,
)
from bsonstream.bson.writer import BsonWriter

__all__ = [
    'BsonReader',
    'BsonWriter',
    'BsonType',
    'BsonBinarySubType',
    'GuidByteOrder',
    'BsonValue',
    'BsonArray',
    'BsonBinary',
    'BsonBoolean',
    'BsonDateTime',
    'BsonDocument',
    'BsonDouble',
    'BsonInt32',
    'BsonInt64',
    'BsonJavaScript',
    'BsonNull',
    'BsonObjectId',
    'BsonRegex',
    'BsonString',
    'BsonSymbol',
    'BsonTimestamp',
    'BsonUndefined',
    'read_value',
    'write_value',
    'encode_document',
    'decode_document',
    'to_python',
]
