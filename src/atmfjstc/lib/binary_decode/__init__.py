"""
Composable decoders for little-endian structured binary data, as found in game asset and model files.

Everything operates on a forward-only `ByteReader` and is built around the notion of a *decodable type* (see
`decodable`). The package offers one entry point per kind of data:

- `read_primitive`: fixed-width ints and floats (`U8`, `I8`, `U16`, ... `F32`, `F64`)
- `read_sequence`: a fixed number of elements (`FixedArray` in schemas)
- `read_list`: a list prefixed by a u16 or u32 count (`LengthPrefixedList`)
- `read_grid`: a rectangular 2D collection prefixed by two u16 dimensions (`Grid2D`)
- `read_padded_records`: a byte-length-prefixed region of variable-size, 4-byte aligned records (`PaddedRecordStream`)
- `open_compressed_section`: a zlib-compressed section, returned as a lazy stream (`CompressedSection`)
- `skip`: discards a fixed number of bytes (`Skip`)

Composite types can be written by hand as `Decodable` subclasses, or generated with `schema.decodable_struct`.

Decoding is all-or-nothing: any failure raises a `DecodeError` subclass and no partial result is returned.

Note that owing to the interpreted nature of Python, these utilities are intrinsically very inefficient. They are meant
to handle files with up to some hundreds of thousands of values. For larger data sets, it is best to consider using
modules written in C or some other systems programming language.
"""

from .errors import DecodeError, DecodeIOError, DecodeMissingDataError, DecodeReadPastEndError, \
    DecodeTransportError, DecodeDecompressionError, DecodeSizeMismatchError, DecodeAllocationLimitError, \
    DecodeMisalignedRecordError
from .ByteReader import ByteReader, DecodeLimits, DEFAULT_LIMITS, UNLIMITED
from .decodable import Decodable, DecodableSpec, PrimitiveType, Skip, U8, I8, U16, I16, U32, I32, U64, I64, F32, \
    F64, decode, read_primitive, register_decoder, skip
from .sequences import FixedArray, LengthPrefixedList, Grid2D, read_sequence, read_list, read_grid
from .records import PaddedRecordStream, read_padded_records
from .compressed import CompressedSection, CompressedSectionStream, open_compressed_section, read_compressed_section


__version__ = '1.0.0'
