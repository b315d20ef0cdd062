"""
Decoder for padded record streams: regions of variable-size records whose total byte length is known, but whose count
is not.

Layout::

    [half_length: u32][record][padding]?[record][padding]?...

The region is ``half_length * 2`` bytes long. Each record is padded to a 4-byte boundary; since records are always an
even number of bytes long, the padding is either 0 or 2 bytes.
"""

import logging

from typing import Any, List, Optional

from .ByteReader import ByteReader, ReaderLike, ensure_reader
from .decodable import DecodableSpec, DecodableType, decode
from .errors import DecodeMisalignedRecordError


LOG = logging.getLogger(__name__)


def read_padded_records(
    reader: ReaderLike, element_type: DecodableType, meaning: Optional[str] = None, check_alignment: bool = True
) -> List[Any]:
    """
    Decodes a padded record stream.

    The region is buffered in its entirety first, then records are decoded from the buffer until it is exhausted.
    Decoding stops only when the cursor lands exactly on the end of the region; if a record (or its padding) would
    extend past the end, the call fails instead.

    Args:
        reader: The reader to consume bytes from.
        element_type: The decodable type of each record.
        meaning: An indication as to what the records are (e.g. "meshes"). It is used in the text of any exceptions.
        check_alignment: If True (the default), a record occupying an odd number of bytes raises
            `DecodeMisalignedRecordError`. If False, the 2-byte correction is applied regardless.

    Returns:
        The decoded records, in order.

    Raises:
        DecodeAllocationLimitError: If the region size exceeds the configured maximum.
        DecodeError: Any subclass, if any record fails to decode. No partial result is returned.
    """

    reader = ensure_reader(reader)

    what = meaning or 'padded record region'

    region_size = reader.read_length(4, f"half-length of {what}") * 2
    region = reader.read_region(region_size, what)

    LOG.debug(f"Buffered {region_size} bytes of {what}")

    records = []

    while region_size - region.tell() != 0:
        record_start = region.tell()
        records.append(decode(region, element_type))
        consumed = region.tell() - record_start

        if consumed == 0:
            raise ValueError(f"Record type {element_type!r} consumed no bytes, the region would never be exhausted")
        if consumed % 4 != 0:
            if check_alignment and (consumed % 2 != 0):
                raise DecodeMisalignedRecordError(record_start, consumed)

            region.skip_bytes(2, 'record alignment padding')

    LOG.debug(f"Decoded {len(records)} records from {what}")

    return records


class PaddedRecordStream(DecodableSpec):
    element_type: DecodableType
    check_alignment: bool

    def __init__(self, element_type: DecodableType, check_alignment: bool = True):
        self.element_type = element_type
        self.check_alignment = check_alignment

    def decode(self, reader: ByteReader) -> List[Any]:
        return read_padded_records(reader, self.element_type, check_alignment=self.check_alignment)

    def __repr__(self) -> str:
        return f"PaddedRecordStream({self.element_type!r})"
