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

"""
This module implements encoding of a double precision float as 8 little-endian bytes (IEEE 754 binary64).

>>> se = Serializer.build_bytes_serializer()
>>> encode_double(se, 1.5)  # writes 000000000000f83f
>>> encode_double(se, -0.0)  # writes 0000000000000080
>>> bytes(se.finalize()).hex()
'000000000000f83f0000000000000080'

>>> de = Deserializer.build_bytes_deserializer(bytes.fromhex('000000000000f83f0000000000000080'))
>>> decode_double(de)
1.5
>>> decode_double(de)
-0.0
>>> de.finalize()
"""

from bsonstream.serialization import Deserializer, Serializer


def encode_double(serializer: Serializer, value: float) -> None:
    """ Encodes a float using 8 bytes, bit-exact including NaN payloads and the sign of zero.
    """
    serializer.write_struct('<d', value)


def decode_double(deserializer: Deserializer) -> float:
    """ Decodes a float from 8 bytes.
    """
    value, = deserializer.read_struct('<d')
    return value
