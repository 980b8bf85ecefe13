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
This module implements the "C-string" encoding: the UTF-8 bytes of a string followed by a single 0x00 byte.

It is used for element names and for the pattern and options of a regex. There is no length prefix, so the encoded
value cannot contain an embedded 0x00 byte, this isn't checked when encoding.

>>> se = Serializer.build_bytes_serializer()
>>> encode_cstring(se, 'name')  # writes 6e616d6500
>>> encode_cstring(se, '')  # writes 00
>>> encode_cstring(se, 'ação')  # writes 61c3a7c3a36f00
>>> bytes(se.finalize()).hex()
'6e616d65000061c3a7c3a36f00'

>>> de = Deserializer.build_bytes_deserializer(bytes.fromhex('6e616d65000061c3a7c3a36f00'))
>>> decode_cstring(de)  # reads 6e616d6500
'name'
>>> decode_cstring(de)  # reads 00
''
>>> decode_cstring(de)  # reads 61c3a7c3a36f00
'ação'
>>> de.finalize()

>>> de = Deserializer.build_bytes_deserializer(b'name')
>>> try:
...     decode_cstring(de)
... except ValueError as e:
...     print(*e.args)
not enough bytes to read
"""

from bsonstream.serialization import Deserializer, Serializer
from bsonstream.serialization.exceptions import BadDataError


def encode_cstring(serializer: Serializer, value: str) -> None:
    """ Encodes a string using UTF-8 and a 0x00 terminator.

    This modules's docstring has more details and examples.
    """
    assert isinstance(value, str)
    serializer.write_bytes(value.encode('utf-8'))
    serializer.write_byte(0x00)


def decode_cstring(deserializer: Deserializer) -> str:
    """ Decodes a UTF-8 string up to (and consuming) the next 0x00 byte.

    This modules's docstring has more details and examples.
    """
    data = bytearray()
    while (b := deserializer.read_byte()) != 0x00:
        data.append(b)
    try:
        return data.decode('utf-8')
    except UnicodeDecodeError as e:
        raise BadDataError('invalid utf-8 in c-string') from e
