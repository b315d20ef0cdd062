import io
import unittest

from atmfjstc.lib.binary_decode.ByteReader import ByteReader, DecodeLimits, UNLIMITED, ensure_reader
from atmfjstc.lib.binary_decode.errors import DecodeMissingDataError, DecodeReadPastEndError, DecodeTransportError, \
    DecodeAllocationLimitError, DecodeIOError


class TrickleReader(io.RawIOBase):
    """
    Non-seekable file object that returns at most `chunk_size` bytes per read, like a slow socket.
    """

    def __init__(self, data: bytes, chunk_size: int = 1):
        self._data = data
        self._chunk_size = chunk_size
        self._offset = 0

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        n_bytes = min(len(buffer), self._chunk_size, len(self._data) - self._offset)
        buffer[:n_bytes] = self._data[self._offset:self._offset + n_bytes]
        self._offset += n_bytes

        return n_bytes

    @property
    def consumed(self) -> int:
        return self._offset


class FailingReader(io.RawIOBase):
    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        raise OSError("connection reset")


class NoSeekBytesIO(io.BytesIO):
    def seek(self, *args, **kwargs):
        raise AssertionError("The reader must never seek")


class ReadAmountTest(unittest.TestCase):
    def test_exact(self):
        reader = ByteReader(b'\x01\x02\x03\x04')

        self.assertEqual(reader.read_amount(3), b'\x01\x02\x03')
        self.assertEqual(reader.tell(), 3)

    def test_zero(self):
        reader = ByteReader(b'')

        self.assertEqual(reader.read_amount(0), b'')

    def test_missing_data(self):
        reader = ByteReader(b'\x01')
        reader.read_amount(1)

        with self.assertRaises(DecodeMissingDataError) as ctx:
            reader.read_amount(2, 'vertex count')

        self.assertEqual(ctx.exception.position, 1)
        self.assertEqual(ctx.exception.expected_length, 2)
        self.assertIn('vertex count', str(ctx.exception))

    def test_read_past_end(self):
        reader = ByteReader(b'\x01\x02\x03')

        with self.assertRaises(DecodeReadPastEndError) as ctx:
            reader.read_amount(4)

        self.assertEqual(ctx.exception.position, 0)
        self.assertEqual(ctx.exception.actual_length, 3)

    def test_short_reads_are_handled(self):
        reader = ByteReader(TrickleReader(b'abcdefgh', chunk_size=3))

        self.assertEqual(reader.read_amount(7), b'abcdefg')
        self.assertEqual(reader.tell(), 7)

    def test_transport_failure(self):
        reader = ByteReader(FailingReader())

        with self.assertRaises(DecodeTransportError) as ctx:
            reader.read_amount(4, 'header')

        self.assertIsInstance(ctx.exception, DecodeIOError)
        self.assertIsInstance(ctx.exception.__cause__, OSError)

    def test_starts_at_current_position_of_seekable_input(self):
        fileobj = io.BytesIO(b'\x00\x00\x07')
        fileobj.seek(2)

        reader = ByteReader(fileobj)

        self.assertEqual(reader.tell(), 2)
        self.assertEqual(reader.read_amount(1), b'\x07')


class InputArgTest(unittest.TestCase):
    def test_bytearray(self):
        self.assertEqual(ByteReader(bytearray(b'\x05')).read_amount(1), b'\x05')

    def test_text_fileobj_rejected(self):
        with self.assertRaises(TypeError):
            ByteReader(io.StringIO('text'))

    def test_other_types_rejected(self):
        with self.assertRaises(TypeError):
            ByteReader([1, 2, 3])

    def test_ensure_reader(self):
        reader = ByteReader(b'')

        self.assertIs(ensure_reader(reader), reader)
        self.assertIsInstance(ensure_reader(b'\x00'), ByteReader)


class ReadStructTest(unittest.TestCase):
    def test_little_endian_by_default(self):
        reader = ByteReader(b'\x01\x02\x03\x04\x05\x06')

        self.assertEqual(reader.read_struct('HI'), (0x0201, 0x06050403))

    def test_explicit_byte_order_wins(self):
        self.assertEqual(ByteReader(b'\x01\x02').read_struct('>H'), (0x0102,))

    def test_empty_format(self):
        self.assertEqual(ByteReader(b'').read_struct(''), ())


class ReadLengthTest(unittest.TestCase):
    def test_u16(self):
        reader = ByteReader(b'\x34\x12\xff')

        self.assertEqual(reader.read_length(2), 0x1234)
        self.assertEqual(reader.tell(), 2)

    def test_u32(self):
        self.assertEqual(ByteReader(b'\x00\x00\x00\x80').read_length(4), 0x80000000)

    def test_bad_width(self):
        for width in (0, 1, 3, 8):
            with self.assertRaises(ValueError):
                ByteReader(b'\x00' * 8).read_length(width)


class SkipBytesTest(unittest.TestCase):
    def test_exact_to_end(self):
        reader = ByteReader(b'\x01\x02\x03\x04\x05')

        reader.skip_bytes(5)

        self.assertEqual(reader.tell(), 5)
        self.assertTrue(reader.at_end())

    def test_shortfall(self):
        source = TrickleReader(b'\x01\x02\x03')
        reader = ByteReader(source)

        with self.assertRaises(DecodeReadPastEndError) as ctx:
            reader.skip_bytes(5)

        self.assertEqual(ctx.exception.actual_length, 3)
        self.assertEqual(source.consumed, 3)

    def test_nothing_left(self):
        with self.assertRaises(DecodeMissingDataError):
            ByteReader(b'').skip_bytes(1)

    def test_never_seeks(self):
        reader = ByteReader(NoSeekBytesIO(b'\x00' * 10))

        reader.skip_bytes(6)

        self.assertEqual(reader.read_amount(4), b'\x00' * 4)

    def test_negative(self):
        with self.assertRaises(ValueError):
            ByteReader(b'').skip_bytes(-1)


class ReadRegionTest(unittest.TestCase):
    def test_region_is_independent(self):
        reader = ByteReader(b'\x01\x02\x03\x04\x05')

        region = reader.read_region(3)

        self.assertEqual(region.tell(), 0)
        self.assertEqual(region.read_amount(3), b'\x01\x02\x03')
        self.assertTrue(region.at_end())
        self.assertEqual(reader.tell(), 3)
        self.assertEqual(reader.read_amount(2), b'\x04\x05')

    def test_region_inherits_limits(self):
        limits = DecodeLimits(max_element_count=5, max_region_size=100)

        region = ByteReader(b'\x00' * 4, limits=limits).read_region(4)

        self.assertIs(region.limits, limits)

    def test_region_limit(self):
        reader = ByteReader(b'\x00' * 16, limits=DecodeLimits(max_region_size=8))

        with self.assertRaises(DecodeAllocationLimitError) as ctx:
            reader.read_region(9)

        self.assertEqual(ctx.exception.requested, 9)
        self.assertEqual(ctx.exception.limit, 8)
        self.assertEqual(reader.tell(), 0)

    def test_unlimited(self):
        reader = ByteReader(b'', limits=UNLIMITED)

        reader.check_count(1 << 40, 'list')
        reader.check_region_size(1 << 40, 'region')


class AtEndTest(unittest.TestCase):
    def test_does_not_consume(self):
        reader = ByteReader(b'\x09')

        self.assertFalse(reader.at_end())
        self.assertEqual(reader.read_amount(1), b'\x09')
        self.assertTrue(reader.at_end())

    def test_requires_seekable(self):
        with self.assertRaises(ValueError):
            ByteReader(TrickleReader(b'')).at_end()
