"""
This module contains the `ByteReader` class, a forward-only wrapper for binary I/O streams on top of which all the
decoders in this package operate.
"""

import struct

from dataclasses import dataclass
from typing import Union, BinaryIO, Optional, AnyStr
from io import BytesIO, IOBase, TextIOBase

from .errors import DecodeMissingDataError, DecodeReadPastEndError, DecodeTransportError, DecodeAllocationLimitError


@dataclass(frozen=True)
class DecodeLimits:
    """
    Safety limits applied to counts and byte lengths read from the data, before anything is allocated based on them.

    Attributes:
        max_element_count: The maximum number of elements a list or grid may declare. None disables the check.
        max_region_size: The maximum size, in bytes, of a region that is buffered in memory (padded record regions,
            compressed payloads). None disables the check.
    """

    max_element_count: Optional[int] = 1 << 24
    max_region_size: Optional[int] = 1 << 28


DEFAULT_LIMITS = DecodeLimits()
UNLIMITED = DecodeLimits(max_element_count=None, max_region_size=None)


class ByteReader:
    """
    This class wraps a binary I/O file object (or a bytes value) and offers the primitive operations needed for
    decoding little-endian structured data: exact reads, length fields, skipping and buffering of sub-regions.

    The reader only ever moves forward, and never seeks in the underlying stream, so it works equally well on files,
    pipes and sockets.
    """

    _fileobj: BinaryIO
    _limits: DecodeLimits

    _position: int

    def __init__(
        self, data_or_fileobj: Union[bytes, bytearray, memoryview, BinaryIO], limits: DecodeLimits = DEFAULT_LIMITS
    ):
        self._fileobj = _parse_main_input_arg(data_or_fileobj)
        self._limits = limits

        self._position = self._fileobj.tell() if self._fileobj.seekable() else 0

    @property
    def limits(self) -> DecodeLimits:
        return self._limits

    def name(self) -> Optional[AnyStr]:
        name = getattr(self._fileobj, 'name', None)

        return None if ((name is None) or (name == '')) else name

    def seekable(self) -> bool:
        return self._fileobj.seekable()

    def tell(self) -> int:
        return self._position

    def at_end(self) -> bool:
        """
        Checks whether the data is exhausted, without consuming anything. Only available for seekable readers (which
        includes all readers created from bytes and all region readers).
        """
        if not self.seekable():
            raise ValueError("This operation can only be performed on seekable readers")

        original_position = self._fileobj.tell()
        at_end = len(self._fileobj.read(1)) == 0
        self._fileobj.seek(original_position)

        return at_end

    def read_at_most(self, n_bytes: int, meaning: Optional[str] = None) -> bytes:
        """
        Try to read `n_bytes` of data, returning fewer only if the data is exhausted.

        Short reads, e.g. from a socket, are handled.

        Args:
            n_bytes: The number of bytes to try to read.
            meaning: An indication as to the meaning of the data being read. Only used if the transport fails.

        Returns:
            The read data, at most `n_bytes` in length.

        Raises:
            DecodeTransportError: If the underlying file object raised an `OSError`.
        """

        if n_bytes < 0:
            raise ValueError("The number of bytes to read cannot be negative")
        if n_bytes == 0:
            return b''

        data = self._raw_read(n_bytes, meaning)

        while len(data) < n_bytes:
            new_data = self._raw_read(n_bytes - len(data), meaning)

            if len(new_data) == 0:
                break

            data += new_data

        return data

    def _raw_read(self, n_bytes: int, meaning: Optional[str]) -> bytes:
        try:
            data = self._fileobj.read(n_bytes)
        except OSError as e:
            raise DecodeTransportError(self._position, meaning) from e

        data = data or b''
        self._position += len(data)

        return data

    def read_amount(self, n_bytes: int, meaning: Optional[str] = None) -> bytes:
        """
        Reads exactly `n_bytes` from the underlying stream.

        Args:
            n_bytes: The amount of bytes to read.
            meaning: An indication as to the meaning of the data being read (e.g. "vertex count"). It is used in the
                text of any exceptions that may be thrown.

        Returns:
            The data, as a `bytes` object `n_bytes` in length.

        Raises:
            DecodeMissingDataError: If we are at the end of the stream and no bytes are left at all.
            DecodeReadPastEndError: If we read some bytes, but reached the end of the data before we got the full
                `n_bytes`.
            DecodeTransportError: If the underlying file object raised an `OSError`.
        """

        if n_bytes == 0:
            return b''

        original_pos = self._position

        data = self.read_at_most(n_bytes, meaning)

        if len(data) == 0:
            raise DecodeMissingDataError(self._position, n_bytes, meaning)
        if len(data) < n_bytes:
            raise DecodeReadPastEndError(original_pos, n_bytes, len(data), meaning)

        return data

    def read_struct(self, struct_format: str, meaning: Optional[str] = None) -> tuple:
        """
        Reads structured data from the underlying stream.

        Args:
            struct_format: The format of the structured data, as per the Python `struct` package. Little-endian byte
                order is assumed unless the format starts with an explicit byte order specifier.
            meaning: An indication as to the meaning of the data being read. It is used in the text of any exceptions
                that may be thrown.

        Returns:
           The data in the structure, as a tuple.
        """

        if struct_format == '':
            return ()
        if struct_format[0] not in '@=<>!':
            struct_format = '<' + struct_format

        meaning = meaning or f"struct ({struct_format})"

        data = self.read_amount(struct.calcsize(struct_format), meaning)

        return struct.unpack(struct_format, data)

    def read_length(self, n_bytes: int, meaning: Optional[str] = None) -> int:
        """
        Reads an unsigned little-endian length field, as used before lists and regions.

        Args:
            n_bytes: The width of the field, in bytes. Must be 2 or 4.
            meaning: An indication as to what the length refers to. It is used in the text of any exceptions.

        Returns:
            The length, as an int.
        """

        if n_bytes not in (2, 4):
            raise ValueError(f"Length fields must be 2 or 4 bytes wide, got {n_bytes}")

        return int.from_bytes(self.read_amount(n_bytes, meaning or 'length'), byteorder='little', signed=False)

    def skip_bytes(self, n_bytes: int, meaning: Optional[str] = None):
        """
        Skips over a number of bytes, ignoring the data. The bytes MUST be present.

        The bytes are always read and discarded, even if the underlying stream is seekable.

        Args:
            n_bytes: The number of bytes to skip.
            meaning: An indication as to the meaning of the data being skipped (e.g. "padding"). It is used in the
                text of any exceptions that may be thrown.

        Raises:
            DecodeMissingDataError: If we are at the end of the stream and no bytes are left at all.
            DecodeReadPastEndError: If we read some bytes, but reached the end of the data before we got the full
                length required.
        """

        if n_bytes < 0:
            raise ValueError("Number of bytes to skip must be non-negative")
        if n_bytes == 0:
            return

        original_pos = self._position

        BUF_SIZE = 1000000

        total_read = 0
        while total_read < n_bytes:
            to_read = min(BUF_SIZE, n_bytes - total_read)

            data = self.read_at_most(to_read, meaning)
            total_read += len(data)

            if len(data) < to_read:
                if total_read == 0:
                    raise DecodeMissingDataError(original_pos, n_bytes, meaning)

                raise DecodeReadPastEndError(original_pos, n_bytes, total_read, meaning)

    def read_region(self, n_bytes: int, meaning: Optional[str] = None) -> 'ByteReader':
        """
        Buffers exactly `n_bytes` from the stream and returns an independent reader over them.

        The returned reader starts at position 0 and inherits this reader's limits. Bytes past the region are left
        untouched in this reader.

        Raises:
            DecodeAllocationLimitError: If `n_bytes` exceeds the configured maximum region size. Nothing is read in
                this case.
        """

        self.check_region_size(n_bytes, meaning or 'region')

        return ByteReader(self.read_amount(n_bytes, meaning), limits=self._limits)

    def check_count(self, count: int, what: str):
        limit = self._limits.max_element_count

        if (limit is not None) and (count > limit):
            raise DecodeAllocationLimitError(f"element count of {what}", count, limit)

    def check_region_size(self, n_bytes: int, what: str):
        limit = self._limits.max_region_size

        if (limit is not None) and (n_bytes > limit):
            raise DecodeAllocationLimitError(f"byte size of {what}", n_bytes, limit)


ReaderLike = Union[ByteReader, bytes, bytearray, memoryview, BinaryIO]


def ensure_reader(source: ReaderLike) -> ByteReader:
    """
    Returns `source` itself if it is already a `ByteReader`, otherwise wraps it in a new one with the default limits.
    """
    return source if isinstance(source, ByteReader) else ByteReader(source)


def _parse_main_input_arg(input_: Union[bytes, bytearray, memoryview, BinaryIO]) -> BinaryIO:
    if isinstance(input_, (bytes, bytearray, memoryview)):
        return BytesIO(input_)

    if not isinstance(input_, IOBase):
        raise TypeError("Input to ByteReader must be either bytes or a file object")
    if isinstance(input_, TextIOBase):
        raise TypeError("ByteReader works on binary, not text file objects")

    return input_
