"""
Decoders for collection-shaped data whose shape is fully determined up front: fixed-count sequences, fixed-size arrays,
length-prefixed lists and rectangular 2D grids.

All of these consume exactly ``count * element size`` bytes (plus any length fields). If any element fails to decode,
the whole call fails and no partial collection is returned.
"""

from typing import Any, List, Optional, Tuple

from .ByteReader import ByteReader, ReaderLike, ensure_reader
from .decodable import DecodableSpec, DecodableType, decode


def read_sequence(reader: ReaderLike, element_type: DecodableType, count: int) -> List[Any]:
    """
    Decodes exactly `count` elements of the given type, in order.

    Args:
        reader: The reader to consume bytes from.
        element_type: The decodable type of each element.
        count: The number of elements, as known at the call site.

    Returns:
        A list of exactly `count` elements.
    """

    if count < 0:
        raise ValueError(f"Element count must be non-negative, is {count}")

    reader = ensure_reader(reader)

    return [decode(reader, element_type) for _ in range(count)]


def read_list(
    reader: ReaderLike, element_type: DecodableType, length_bytes: int = 2, meaning: Optional[str] = None
) -> List[Any]:
    """
    Decodes a list prefixed by its element count.

    Args:
        reader: The reader to consume bytes from.
        element_type: The decodable type of each element.
        length_bytes: The width of the count field: 2 (u16) or 4 (u32).
        meaning: An indication as to what the list contains. It is used in the text of any exceptions.

    Returns:
        The decoded elements. A count of 0 yields an empty list, with only the count field consumed.
    """

    reader = ensure_reader(reader)

    what = meaning or 'list'

    count = reader.read_length(length_bytes, f"length of {what}")
    reader.check_count(count, what)

    return read_sequence(reader, element_type, count)


def read_grid(reader: ReaderLike, element_type: DecodableType, meaning: Optional[str] = None) -> List[List[Any]]:
    """
    Decodes a rectangular 2D collection prefixed by two u16 dimensions: the number of rows, then the number of elements
    in each row. Elements are stored row by row.

    Returns:
        A list of rows, each of them a list with the same number of elements.
    """

    reader = ensure_reader(reader)

    what = meaning or 'grid'

    n_rows = reader.read_length(2, f"row count of {what}")
    n_columns = reader.read_length(2, f"column count of {what}")
    reader.check_count(n_rows * n_columns, what)

    return [read_sequence(reader, element_type, n_columns) for _ in range(n_rows)]


class FixedArray(DecodableSpec):
    """
    An array whose size is fixed by the schema. Decodes to a tuple of exactly `count` elements.
    """

    element_type: DecodableType
    count: int

    def __init__(self, element_type: DecodableType, count: int):
        if count < 0:
            raise ValueError(f"Array size must be non-negative, is {count}")

        self.element_type = element_type
        self.count = count

    def decode(self, reader: ByteReader) -> Tuple[Any, ...]:
        return tuple(read_sequence(reader, self.element_type, self.count))

    def __repr__(self) -> str:
        return f"FixedArray({self.element_type!r}, {self.count})"


class LengthPrefixedList(DecodableSpec):
    element_type: DecodableType
    length_bytes: int

    def __init__(self, element_type: DecodableType, length_bytes: int = 2):
        if length_bytes not in (2, 4):
            raise ValueError(f"Length fields must be 2 or 4 bytes wide, got {length_bytes}")

        self.element_type = element_type
        self.length_bytes = length_bytes

    def decode(self, reader: ByteReader) -> List[Any]:
        return read_list(reader, self.element_type, self.length_bytes)

    def __repr__(self) -> str:
        return f"LengthPrefixedList({self.element_type!r}, length_bytes={self.length_bytes})"


class Grid2D(DecodableSpec):
    element_type: DecodableType

    def __init__(self, element_type: DecodableType):
        self.element_type = element_type

    def decode(self, reader: ByteReader) -> List[List[Any]]:
        return read_grid(reader, self.element_type)

    def __repr__(self) -> str:
        return f"Grid2D({self.element_type!r})"
