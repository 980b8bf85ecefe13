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
This module implements encoding a point in time as the number of milliseconds since the Unix epoch, as a signed
64-bit little-endian integer.

Naive datetimes are taken to already be in UTC, aware datetimes are converted to UTC first. Precision below a
millisecond is dropped, truncating toward the epoch. Decoding always returns an aware datetime in UTC.

>>> se = Serializer.build_bytes_serializer()
>>> encode_datetime(se, datetime(1970, 1, 1, 0, 0, 1, tzinfo=timezone.utc))  # writes e803000000000000
>>> encode_datetime(se, datetime(1969, 12, 31, 23, 59, 59, 999000))  # writes ffffffffffffffff
>>> bytes(se.finalize()).hex()
'e803000000000000ffffffffffffffff'

>>> de = Deserializer.build_bytes_deserializer(bytes.fromhex('e803000000000000ffffffffffffffff'))
>>> decode_datetime(de)
datetime.datetime(1970, 1, 1, 0, 0, 1, tzinfo=datetime.timezone.utc)
>>> decode_datetime(de)
datetime.datetime(1969, 12, 31, 23, 59, 59, 999000, tzinfo=datetime.timezone.utc)
>>> de.finalize()
"""

from datetime import datetime, timedelta, timezone

from bsonstream.serialization import Deserializer, Serializer
from bsonstream.serialization.exceptions import BadDataError

from .int import decode_int, encode_int

UNIX_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def datetime_to_millis(value: datetime) -> int:
    """Milliseconds between the Unix epoch and `value`, naive values are taken as UTC.

    >>> datetime_to_millis(datetime(1969, 12, 31, 23, 59, 59, 999500))
    0
    >>> datetime_to_millis(datetime(1969, 12, 31, 23, 59, 59, 998500))
    -1
    >>> datetime_to_millis(datetime(1970, 1, 1, 0, 0, 0, 1999))
    1
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    else:
        value = value.astimezone(timezone.utc)
    delta = value - UNIX_EPOCH
    micros = (delta.days * 86_400 + delta.seconds) * 1_000_000 + delta.microseconds
    # truncate toward zero, so a value just before the epoch maps to 0 and not to -1
    millis = abs(micros) // 1000
    return millis if micros >= 0 else -millis


def millis_to_datetime(millis: int) -> datetime:
    try:
        return UNIX_EPOCH + timedelta(milliseconds=millis)
    except OverflowError as e:
        raise BadDataError(f'{millis}ms since epoch is out of the supported datetime range') from e


def encode_datetime(serializer: Serializer, value: datetime) -> None:
    """ Encodes a datetime as milliseconds since the Unix epoch.

    This modules's docstring has more details and examples.
    """
    assert isinstance(value, datetime)
    encode_int(serializer, datetime_to_millis(value), length=8, signed=True)


def decode_datetime(deserializer: Deserializer) -> datetime:
    """ Decodes a datetime from milliseconds since the Unix epoch.

    This modules's docstring has more details and examples.
    """
    millis = decode_int(deserializer, length=8, signed=True)
    return millis_to_datetime(millis)
