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

from pathlib import Path
from typing import Optional, Union

from pydantic import field_validator

from bsonstream.bson.types import MIN_DOCUMENT_SIZE, GuidByteOrder
from bsonstream.serialization.consts import DEFAULT_BYTES_MAX_LENGTH, INT32_MAX
from bsonstream.utils import pydantic


class CodecSettings(pydantic.BaseModel):
    # Byte layout used by write_guid/read_guid for the 16 bytes of a UUID, the default is the .NET Guid layout
    GUID_BYTE_ORDER: GuidByteOrder = GuidByteOrder.LITTLE_ENDIAN

    # Largest length prefix a reader accepts for a document or array, in bytes
    MAX_DOCUMENT_SIZE: int = INT32_MAX

    # Largest single string or binary payload read or written in one call, None lifts the limit
    MAX_BYTES_PER_READ: Optional[int] = DEFAULT_BYTES_MAX_LENGTH

    @field_validator('MAX_DOCUMENT_SIZE')
    @classmethod
    def _validate_max_document_size(cls, value: int) -> int:
        if not (MIN_DOCUMENT_SIZE <= value <= INT32_MAX):
            raise ValueError(f'MAX_DOCUMENT_SIZE must be between {MIN_DOCUMENT_SIZE} and {INT32_MAX}')
        return value

    @field_validator('MAX_BYTES_PER_READ')
    @classmethod
    def _validate_max_bytes_per_read(cls, value: Optional[int]) -> Optional[int]:
        if value is not None and value < 0:
            raise ValueError('MAX_BYTES_PER_READ cannot be negative')
        return value

    @classmethod
    def from_yaml(cls, *, filepath: Union[Path, str]) -> 'CodecSettings':
        """Takes a filepath to a yaml file and returns the validated CodecSettings instance."""
        from bsonstream.utils.yaml import model_from_yaml
        return model_from_yaml(cls, filepath=filepath)
