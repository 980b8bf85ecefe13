import struct
from datetime import datetime, timezone

import pytest

from bsonstream.bson import (
    BsonArray,
    BsonBinary,
    BsonBinarySubType,
    BsonBoolean,
    BsonDateTime,
    BsonDocument,
    BsonDouble,
    BsonInt32,
    BsonInt64,
    BsonJavaScript,
    BsonNull,
    BsonObjectId,
    BsonReader,
    BsonRegex,
    BsonString,
    BsonSymbol,
    BsonTimestamp,
    BsonUndefined,
    BsonWriter,
    decode_document,
    encode_document,
    read_value,
    to_python,
    write_value,
)
from bsonstream.serialization.exceptions import (
    BadDataError,
    InvalidArgumentError,
    InvalidOperationError,
    UnknownTypeError,
    UnsupportedTypeError,
)

EVERYTHING = BsonDocument({
    'double': BsonDouble(2.5),
    'string': BsonString('John Doe'),
    'document': BsonDocument({
        'nested': BsonDocument({'deep': BsonArray([BsonInt32(1), BsonArray([BsonNull()])])}),
    }),
    'array': BsonArray([BsonString('a'), BsonDocument({'x': BsonInt64(-1)}), BsonArray()]),
    'binary': BsonBinary(b'\x00\xff', BsonBinarySubType.MD5),
    'binary_old': BsonBinary(b'old', BsonBinarySubType.BINARY_OLD),
    'user_binary': BsonBinary(b'user', 0x90),
    'undefined': BsonUndefined(),
    'object_id': BsonObjectId(bytes(range(12))),
    'boolean': BsonBoolean(True),
    'datetime': BsonDateTime(datetime(2000, 2, 29, 12, 0, 0, 1000, tzinfo=timezone.utc)),
    'null': BsonNull(),
    'regex': BsonRegex('^x$', 'i'),
    'javascript': BsonJavaScript('function() {}'),
    'symbol': BsonSymbol('sym'),
    'int32': BsonInt32(-2**31),
    'timestamp': BsonTimestamp(1, 2**32 - 1),
    'int64': BsonInt64(2**63 - 1),
})


def test_document_roundtrip() -> None:
    data = encode_document(EVERYTHING)
    assert int.from_bytes(data[:4], 'little') == len(data)
    decoded = decode_document(data)
    assert decoded == EVERYTHING
    assert list(decoded.elements) == list(EVERYTHING.elements)


def test_empty_document() -> None:
    assert encode_document(BsonDocument()) == b'\x05\x00\x00\x00\x00'
    assert decode_document(b'\x05\x00\x00\x00\x00') == BsonDocument()


def test_decode_rejects_trailing_data() -> None:
    with pytest.raises(BadDataError, match='trailing data'):
        decode_document(encode_document(EVERYTHING) + b'\x00')


def test_write_value_inside_array() -> None:
    writer = BsonWriter()
    writer.start_document()
    writer.start_array('items')
    write_value(writer, None, BsonDocument({'a': BsonInt32(1)}))
    write_value(writer, None, BsonArray([BsonBoolean(False)]))
    write_value(writer, None, BsonString('last'))
    writer.end_array()
    writer.end_document()

    assert decode_document(writer.getvalue()) == BsonDocument({
        'items': BsonArray([
            BsonDocument({'a': BsonInt32(1)}),
            BsonArray([BsonBoolean(False)]),
            BsonString('last'),
        ]),
    })


def test_read_value_of_current_element() -> None:
    reader = BsonReader.from_bytes(encode_document(EVERYTHING))
    reader.start_document()
    assert reader.read()
    assert reader.current_name == 'double'
    assert read_value(reader) == BsonDouble(2.5)
    assert reader.read()
    reader.skip()
    assert reader.read()
    assert reader.current_name == 'document'
    value = reader.read_value()
    assert value == EVERYTHING.elements['document']
    # the reader is back at the level of the root document
    assert reader.depth == 1
    assert reader.read()
    assert reader.current_name == 'array'


def test_read_value_without_current_element() -> None:
    reader = BsonReader.from_bytes(encode_document(BsonDocument()))
    reader.start_document()
    with pytest.raises(InvalidOperationError):
        read_value(reader)


@pytest.mark.parametrize('write', [
    lambda w: w.write_min_key('k'),
    lambda w: w.write_max_key('k'),
    lambda w: w.write_decimal128('k', bytes(16)),
])
def test_types_without_generic_value(write) -> None:
    writer = BsonWriter()
    writer.start_document()
    write(writer)
    writer.end_document()
    with pytest.raises(UnsupportedTypeError):
        decode_document(writer.getvalue())


def test_unknown_type_in_generic_read() -> None:
    body = b'\x33x\x00'
    data = struct.pack('<i', 4 + len(body) + 1) + body + b'\x00'
    with pytest.raises(UnknownTypeError):
        decode_document(data)


def test_object_id_value_must_be_12_bytes() -> None:
    with pytest.raises(InvalidArgumentError):
        BsonObjectId(b'short')


def test_to_python() -> None:
    assert to_python(EVERYTHING) == {
        'double': 2.5,
        'string': 'John Doe',
        'document': {'nested': {'deep': [1, [None]]}},
        'array': ['a', {'x': -1}, []],
        'binary': b'\x00\xff',
        'binary_old': b'old',
        'user_binary': b'user',
        'undefined': None,
        'object_id': bytes(range(12)),
        'boolean': True,
        'datetime': datetime(2000, 2, 29, 12, 0, 0, 1000, tzinfo=timezone.utc),
        'null': None,
        'regex': ('^x$', 'i'),
        'javascript': 'function() {}',
        'symbol': 'sym',
        'int32': -2**31,
        'timestamp': (1, 2**32 - 1),
        'int64': 2**63 - 1,
    }
