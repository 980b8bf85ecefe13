import io

import pytest

from bsonstream.serialization import Deserializer, Serializer
from bsonstream.serialization.exceptions import (
    BadDataError,
    InvalidArgumentError,
    InvalidOperationError,
    OutOfDataError,
    TooLongError,
)


def test_bytes_serializer_patch_keeps_cursor() -> None:
    se = Serializer.build_bytes_serializer()
    se.write_bytes(b'\x00\x00\x00\x00')
    se.write_bytes(b'abc')
    se.patch_int32_at(0, 7)
    assert se.cur_pos() == 7
    se.write_byte(0xff)
    assert bytes(se.finalize()) == b'\x07\x00\x00\x00abc\xff'


def test_patch_out_of_range() -> None:
    se = Serializer.build_bytes_serializer()
    se.write_bytes(b'\x00\x00\x00')
    with pytest.raises(InvalidArgumentError):
        se.patch_int32_at(0, 1)
    se.write_byte(0)
    with pytest.raises(InvalidArgumentError):
        se.patch_int32_at(-1, 1)
    with pytest.raises(TooLongError):
        se.patch_int32_at(0, 2**31)


def test_write_bytes_max_bytes() -> None:
    se = Serializer.build_bytes_serializer()
    with pytest.raises(TooLongError):
        se.write_bytes(b'12345', max_bytes=4)
    se.write_bytes(b'12345', max_bytes=None)
    assert se.cur_pos() == 5


def test_write_struct_bad_value() -> None:
    se = Serializer.build_bytes_serializer()
    with pytest.raises(InvalidArgumentError):
        se.write_struct('<i', 2**40)


def test_bytes_deserializer_reads() -> None:
    de = Deserializer.build_bytes_deserializer(b'\x01\x02\x03\x04\x05')
    assert de.peek_byte() == 1
    assert de.read_byte() == 1
    assert bytes(de.read_bytes(2)) == b'\x02\x03'
    assert de.cur_pos() == 3
    de.skip(1)
    assert not de.is_empty()
    with pytest.raises(BadDataError, match='trailing data'):
        de.finalize()
    assert bytes(de.read_all()) == b'\x05'
    assert de.is_empty()
    de.finalize()


def test_bytes_deserializer_out_of_data() -> None:
    de = Deserializer.build_bytes_deserializer(b'\x01\x02')
    with pytest.raises(OutOfDataError):
        de.read_bytes(3)
    with pytest.raises(OutOfDataError):
        de.skip(3)
    # failed reads don't move the cursor
    assert de.cur_pos() == 0
    de.skip(2)
    with pytest.raises(OutOfDataError):
        de.read_byte()
    with pytest.raises(OutOfDataError):
        de.peek_byte()


def test_read_bytes_max_bytes() -> None:
    de = Deserializer.build_bytes_deserializer(b'12345')
    with pytest.raises(TooLongError):
        de.read_bytes(5, max_bytes=4)
    assert bytes(de.read_bytes(5, max_bytes=None)) == b'12345'


def test_stream_serializer_patch() -> None:
    stream = io.BytesIO()
    stream.write(b'xx')
    se = Serializer.build_stream_serializer(stream, leave_open=True)
    assert se.cur_pos() == 2
    se.write_bytes(b'\x00\x00\x00\x00')
    se.write_byte(0x41)
    se.patch_int32_at(2, 5)
    assert se.cur_pos() == 7
    # only what this serializer wrote
    assert bytes(se.finalize()) == b'\x05\x00\x00\x00A'
    se.close()
    assert not stream.closed
    assert stream.getvalue() == b'xx\x05\x00\x00\x00A'


def test_stream_serializer_closes_stream() -> None:
    stream = io.BytesIO()
    se = Serializer.build_stream_serializer(stream)
    se.write_byte(0)
    se.close()
    assert stream.closed
    # closing twice is fine
    se.close()


class _NonSeekable(io.RawIOBase):
    def seekable(self) -> bool:
        return False

    def writable(self) -> bool:
        return True

    def readable(self) -> bool:
        return True


def test_stream_must_be_seekable() -> None:
    with pytest.raises(InvalidArgumentError):
        Serializer.build_stream_serializer(_NonSeekable())
    with pytest.raises(InvalidArgumentError):
        Deserializer.build_stream_deserializer(_NonSeekable())


class _WriteOnly(io.BytesIO):
    def readable(self) -> bool:
        return False


def test_stream_serializer_finalize_needs_readable_stream() -> None:
    se = Serializer.build_stream_serializer(_WriteOnly())
    se.write_byte(1)
    with pytest.raises(InvalidOperationError):
        se.finalize()


def test_stream_deserializer() -> None:
    stream = io.BytesIO(b'\x01\x02\x03\x04')
    de = Deserializer.build_stream_deserializer(stream, leave_open=True)
    assert de.peek_byte() == 1
    assert de.cur_pos() == 0
    assert de.read_byte() == 1
    de.skip(1)
    with pytest.raises(OutOfDataError):
        de.skip(3)
    with pytest.raises(OutOfDataError):
        de.read_bytes(3)
    assert de.cur_pos() == 2
    assert bytes(de.read_bytes(2)) == b'\x03\x04'
    assert de.is_empty()
    de.finalize()
    with pytest.raises(OutOfDataError):
        de.read_byte()
    de.close()
    assert not stream.closed


def test_stream_deserializer_closes_stream() -> None:
    stream = io.BytesIO(b'\x01')
    de = Deserializer.build_stream_deserializer(stream)
    with pytest.raises(BadDataError):
        de.finalize()
    de.close()
    assert stream.closed
