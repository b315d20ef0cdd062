"""
Reader for zlib-compressed sections.

Layout::

    [uncompressed_length: u32][compressed_length: u32][compressed_length bytes of zlib-format data]

The compressed payload is buffered first, and then exposed as a `CompressedSectionStream`, a read-only file object that
inflates the data incrementally as it is read. To decode structures from the decompressed data, wrap the stream in a
`ByteReader`::

    with open_compressed_section(reader) as stream:
        meshes = read_padded_records(ByteReader(stream), Mesh)
"""

import logging
import zlib

from typing import Optional
from io import BufferedIOBase, BytesIO

from .ByteReader import ByteReader, ReaderLike, ensure_reader
from .decodable import DecodableSpec
from .errors import DecodeDecompressionError, DecodeSizeMismatchError


LOG = logging.getLogger(__name__)


class CompressedSectionStream(BufferedIOBase):
    """
    A read-only, non-seekable file object over the decompressed content of a compressed section.

    Decompression happens lazily, in chunks of at most `CHUNK_SIZE` bytes, as data is requested.

    Reading may raise `DecodeDecompressionError` if the payload is not a valid zlib stream, or if it ends before the
    zlib stream does. If `verify_size` was requested, `DecodeSizeMismatchError` is raised when the end of the stream is
    reached and the amount of data produced differs from the declared uncompressed size; otherwise the mismatch is
    only logged.
    """

    CHUNK_SIZE = 65536

    _source: BytesIO
    _decompressor: 'zlib._Decompress'

    _uncompressed_size: int
    _compressed_size: int
    _verify_size: bool

    _pending: bytes = b''
    _produced: int = 0
    _finished: bool = False

    def __init__(self, compressed_data: bytes, uncompressed_size: int, verify_size: bool = False):
        super().__init__()

        self._source = BytesIO(compressed_data)
        self._decompressor = zlib.decompressobj()

        self._uncompressed_size = uncompressed_size
        self._compressed_size = len(compressed_data)
        self._verify_size = verify_size

    @property
    def uncompressed_size(self) -> int:
        """
        The uncompressed size declared in the section header. It is not guaranteed to match the actual data unless
        `verify_size` was requested.
        """
        return self._uncompressed_size

    @property
    def compressed_size(self) -> int:
        return self._compressed_size

    def readable(self) -> bool:
        return True

    def read(self, size: Optional[int] = -1) -> bytes:
        self._check_open()

        unlimited = (size is None) or (size < 0)

        parts = []
        total_read = 0

        while unlimited or (total_read < size):
            chunk = self._read_chunk(self.CHUNK_SIZE if unlimited else (size - total_read))
            if len(chunk) == 0:
                break

            parts.append(chunk)
            total_read += len(chunk)

        return b''.join(parts)

    def read1(self, size: int = -1) -> bytes:
        self._check_open()

        return self._read_chunk(self.CHUNK_SIZE if ((size is None) or (size < 0)) else size)

    def close(self):
        self._source.close()
        self._pending = b''

        super().close()

    def _check_open(self):
        if self.closed:
            raise ValueError("Cannot read from closed compressed section stream")

    def _read_chunk(self, max_size: int) -> bytes:
        if max_size == 0:
            return b''

        while (len(self._pending) == 0) and not self._finished:
            self._inflate_more()

        chunk = self._pending[:max_size]
        self._pending = self._pending[max_size:]

        return chunk

    def _inflate_more(self):
        data = self._decompressor.unconsumed_tail
        if len(data) == 0:
            data = self._source.read(self.CHUNK_SIZE)

        try:
            if len(data) > 0:
                output = self._decompressor.decompress(data, self.CHUNK_SIZE)
            else:
                output = self._decompressor.flush()
        except zlib.error as e:
            raise DecodeDecompressionError(f"Compressed section is not a valid zlib stream: {e}") from e

        self._pending += output
        self._produced += len(output)

        if self._decompressor.eof:
            self._finish()
        elif len(data) == 0:
            raise DecodeDecompressionError(
                f"Compressed section data ends before the end of the zlib stream "
                f"(after {self._compressed_size} compressed bytes)"
            )

    def _finish(self):
        self._finished = True

        trailing = len(self._decompressor.unused_data) + len(self._source.read())
        if trailing > 0:
            LOG.debug(f"Ignoring {trailing} bytes after the end of the zlib stream in compressed section")

        if self._produced == self._uncompressed_size:
            return

        if self._verify_size:
            raise DecodeSizeMismatchError(self._uncompressed_size, self._produced)

        LOG.warning(
            f"Compressed section declares {self._uncompressed_size} uncompressed bytes, but {self._produced} were "
            f"produced"
        )


def open_compressed_section(
    reader: ReaderLike, verify_size: bool = False, meaning: Optional[str] = None
) -> CompressedSectionStream:
    """
    Reads a compressed section header and payload, and returns a lazy stream over the decompressed data.

    Only the compressed payload is consumed from `reader`; no decompression happens until the returned stream is read.

    Args:
        reader: The reader to consume bytes from.
        verify_size: Whether to check the declared uncompressed size against the amount of data actually produced. The
            check is off by default, as the declared size is informational in the files this format is used in.
        meaning: An indication as to what the section contains. It is used in the text of any exceptions.

    Returns:
        A `CompressedSectionStream`. It owns a copy of the compressed payload and does not refer back to `reader`.

    Raises:
        DecodeAllocationLimitError: If the compressed length exceeds the configured maximum region size.
        DecodeIOError: If the header or payload are truncated.
    """

    reader = ensure_reader(reader)

    what = meaning or 'compressed section'

    uncompressed_size = reader.read_length(4, f"uncompressed length of {what}")
    compressed_size = reader.read_length(4, f"compressed length of {what}")

    reader.check_region_size(compressed_size, what)
    compressed_data = reader.read_amount(compressed_size, what)

    LOG.debug(f"Buffered {what}: {compressed_size} compressed bytes, {uncompressed_size} declared uncompressed bytes")

    return CompressedSectionStream(compressed_data, uncompressed_size, verify_size=verify_size)


def read_compressed_section(reader: ReaderLike, verify_size: bool = False, meaning: Optional[str] = None) -> bytes:
    """
    Like `open_compressed_section`, but decompresses the whole section at once and returns the data.
    """

    with open_compressed_section(reader, verify_size=verify_size, meaning=meaning) as stream:
        return stream.read()


class CompressedSection(DecodableSpec):
    verify_size: bool

    def __init__(self, verify_size: bool = False):
        self.verify_size = verify_size

    def decode(self, reader: ByteReader) -> CompressedSectionStream:
        return open_compressed_section(reader, verify_size=self.verify_size)

    def __repr__(self) -> str:
        return f"CompressedSection(verify_size={self.verify_size})"
