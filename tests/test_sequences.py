import struct
import unittest

from atmfjstc.lib.binary_decode.ByteReader import ByteReader, DecodeLimits
from atmfjstc.lib.binary_decode.decodable import U8, U16, I16, U32, F32, decode
from atmfjstc.lib.binary_decode.errors import DecodeReadPastEndError, DecodeAllocationLimitError, DecodeIOError
from atmfjstc.lib.binary_decode.sequences import FixedArray, LengthPrefixedList, Grid2D, read_sequence, read_list, \
    read_grid


class ReadSequenceTest(unittest.TestCase):
    def test_basic(self):
        reader = ByteReader(struct.pack('<3H', 1, 2, 3) + b'\xff')

        self.assertEqual(read_sequence(reader, U16, 3), [1, 2, 3])
        self.assertEqual(reader.tell(), 6)

    def test_zero(self):
        reader = ByteReader(b'\x01')

        self.assertEqual(read_sequence(reader, U16, 0), [])
        self.assertEqual(reader.tell(), 0)

    def test_negative_count(self):
        with self.assertRaises(ValueError):
            read_sequence(b'', U8, -1)

    def test_truncated(self):
        with self.assertRaises(DecodeReadPastEndError):
            read_sequence(struct.pack('<2H', 1, 2) + b'\x03', U16, 3)


class FixedArrayTest(unittest.TestCase):
    def test_decodes_to_tuple(self):
        reader = ByteReader(struct.pack('<3f', 0.5, 1.0, -2.0))

        self.assertEqual(decode(reader, FixedArray(F32, 3)), (0.5, 1.0, -2.0))
        self.assertEqual(reader.tell(), 12)

    def test_nested(self):
        matrix = decode(bytes(range(6)), FixedArray(FixedArray(U8, 3), 2))

        self.assertEqual(matrix, ((0, 1, 2), (3, 4, 5)))

    def test_fewer_elements_available(self):
        with self.assertRaises(DecodeIOError):
            decode(b'\x01\x02', FixedArray(U8, 3))

    def test_negative_size(self):
        with self.assertRaises(ValueError):
            FixedArray(U8, -3)


class ReadListTest(unittest.TestCase):
    def test_empty_u16(self):
        reader = ByteReader(b'\x00\x00\xaa\xbb')

        self.assertEqual(read_list(reader, U32), [])
        self.assertEqual(reader.tell(), 2)

    def test_two_elements_u16(self):
        reader = ByteReader(b'\x02\x00' + struct.pack('<2h', -5, 300))

        self.assertEqual(read_list(reader, I16), [-5, 300])
        self.assertEqual(reader.tell(), 6)

    def test_u32_count(self):
        reader = ByteReader(b'\x03\x00\x00\x00' + bytes([7, 8, 9]))

        self.assertEqual(read_list(reader, U8, length_bytes=4), [7, 8, 9])
        self.assertEqual(reader.tell(), 7)

    def test_bad_width(self):
        with self.assertRaises(ValueError):
            read_list(b'\x00' * 8, U8, length_bytes=1)

    def test_truncated_element_fails_whole_list(self):
        data = b'\x03\x00' + struct.pack('<2I', 10, 20) + b'\x1e\x00'

        with self.assertRaises(DecodeReadPastEndError) as ctx:
            read_list(data, U32)

        self.assertEqual(ctx.exception.position, 10)

    def test_truncated_count(self):
        with self.assertRaises(DecodeReadPastEndError) as ctx:
            read_list(b'\x01', U8, meaning='bone list')

        self.assertIn('length of bone list', str(ctx.exception))

    def test_count_limit(self):
        reader = ByteReader(b'\x0b\x00' + b'\x00' * 11, limits=DecodeLimits(max_element_count=10))

        with self.assertRaises(DecodeAllocationLimitError):
            read_list(reader, U8)

        self.assertEqual(reader.tell(), 2)

    def test_list_of_lists(self):
        data = b'\x02\x00' + b'\x01\x00\x05' + b'\x02\x00\x06\x07'

        self.assertEqual(read_list(data, LengthPrefixedList(U8)), [[5], [6, 7]])

    def test_as_decodable_type(self):
        reader = ByteReader(b'\x01\x00\x00\x00\x2a\x00')

        self.assertEqual(decode(reader, LengthPrefixedList(U16, length_bytes=4)), [42])

        with self.assertRaises(ValueError):
            LengthPrefixedList(U16, length_bytes=8)


class ReadGridTest(unittest.TestCase):
    def test_row_major(self):
        reader = ByteReader(struct.pack('<HH6H', 2, 3, 1, 2, 3, 4, 5, 6))

        self.assertEqual(read_grid(reader, U16), [[1, 2, 3], [4, 5, 6]])
        self.assertEqual(reader.tell(), 16)

    def test_no_rows(self):
        reader = ByteReader(struct.pack('<HH', 0, 5))

        self.assertEqual(read_grid(reader, U16), [])
        self.assertEqual(reader.tell(), 4)

    def test_empty_rows(self):
        self.assertEqual(read_grid(struct.pack('<HH', 3, 0), U8), [[], [], []])

    def test_truncated(self):
        with self.assertRaises(DecodeReadPastEndError):
            read_grid(struct.pack('<HH5H', 2, 3, 1, 2, 3, 4, 5) + b'\x06', U16)

    def test_total_count_limit(self):
        reader = ByteReader(struct.pack('<HH', 100, 100), limits=DecodeLimits(max_element_count=9999))

        with self.assertRaises(DecodeAllocationLimitError):
            read_grid(reader, U8)

    def test_as_decodable_type(self):
        self.assertEqual(decode(struct.pack('<HH2B', 1, 2, 9, 8), Grid2D(U8)), [[9, 8]])
