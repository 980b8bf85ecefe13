#  Copyright 2025 Hathor Labs
#
#  Licensed under the Apache License, Version 2.0 (the "License");
#  you may not use this file except in compliance with the License.
#  You may obtain a copy of the License at
#
#  http://www.apache.org/licenses/LICENSE-2.0
#
#  Unless required by applicable law or agreed to in writing, software
#  distributed under the License is distributed on an "AS IS" BASIS,
#  WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
#  See the License for the specific language governing permissions and
#  limitations under the License.

r"""
This module implements utf-8 string encoding with a length prefix and a terminator.

Layout: [N+1: int32 little-endian][N bytes of utf-8][0x00]

The length prefix counts the terminator, so the empty string is encoded as `0100000000`. This is the layout shared by
String, JavaScript and Symbol elements.

>>> se = Serializer.build_bytes_serializer()
>>> encode_utf8(se, 'John Doe')  # writes 090000004a6f686e20446f6500
>>> encode_utf8(se, '')  # writes 0100000000
>>> bytes(se.finalize()).hex()
'090000004a6f686e20446f65000100000000'

>>> de = Deserializer.build_bytes_deserializer(bytes.fromhex('090000004a6f686e20446f65000100000000'))
>>> decode_utf8(de)  # reads 090000004a6f686e20446f6500
'John Doe'
>>> decode_utf8(de)  # reads 0100000000
''
>>> de.finalize()

>>> de = Deserializer.build_bytes_deserializer(bytes.fromhex('0500000074657374ff'))
>>> try:
...     decode_utf8(de)
... except ValueError as e:
...     print(*e.args)
string is not terminated by 0x00, got 0xff

>>> de = Deserializer.build_bytes_deserializer(bytes.fromhex('00000000'))
>>> try:
...     decode_utf8(de)
... except ValueError as e:
...     print(*e.args)
invalid string length prefix: 0
"""

from bsonstream.serialization import Deserializer, Serializer
from bsonstream.serialization.consts import DEFAULT_BYTES_MAX_LENGTH
from bsonstream.serialization.exceptions import BadDataError

from .int import decode_int, encode_int


def encode_utf8(serializer: Serializer, value: str, *, max_bytes: int | None = DEFAULT_BYTES_MAX_LENGTH) -> None:
    """ Encodes a string using UTF-8 adding a length prefix and a terminator.

    This modules's docstring has more details and examples.
    """
    assert isinstance(value, str)
    data = value.encode('utf-8')
    encode_int(serializer, len(data) + 1, length=4, signed=True)
    serializer.write_bytes(data, max_bytes=max_bytes)
    serializer.write_byte(0x00)


def decode_utf8(deserializer: Deserializer, *, max_bytes: int | None = DEFAULT_BYTES_MAX_LENGTH) -> str:
    """ Decodes a UTF-8 string with a length prefix and a terminator.

    This modules's docstring has more details and examples.
    """
    size = decode_int(deserializer, length=4, signed=True)
    if size < 1:
        raise BadDataError(f'invalid string length prefix: {size}')
    data = bytes(deserializer.read_bytes(size - 1, max_bytes=max_bytes))
    terminator = deserializer.read_byte()
    if terminator != 0x00:
        raise BadDataError(f'string is not terminated by 0x00, got 0x{terminator:02x}')
    try:
        return data.decode('utf-8')
    except UnicodeDecodeError as e:
        raise BadDataError('invalid utf-8 in string') from e
