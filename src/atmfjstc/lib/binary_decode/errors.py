from typing import Optional


class DecodeError(Exception):
    """
    Base class for all exceptions signalling that the data being decoded is short, corrupt or otherwise does not match
    the expected format.
    """


class DecodeIOError(DecodeError):
    """
    Raised when the required bytes could not be obtained from the underlying stream, either because the data ends or
    because the transport itself failed.
    """


class DecodeReadPastEndError(DecodeIOError):
    position: int
    expected_length: int
    actual_length: int
    meaning: Optional[str]

    def __init__(self, position: int, expected_length: int, actual_length: int, meaning: Optional[str]):
        self.position = position
        self.expected_length = expected_length
        self.actual_length = actual_length
        self.meaning = meaning

        super().__init__(
            f"At position {position}, expected {expected_length} "
            f"bytes{f' for {meaning}' if meaning is not None else ''}"
            f", but only {actual_length} were found"
        )


class DecodeMissingDataError(DecodeIOError):
    position: int
    expected_length: int
    meaning: Optional[str]

    def __init__(self, position: int, expected_length: int, meaning: Optional[str]):
        self.position = position
        self.expected_length = expected_length
        self.meaning = meaning

        super().__init__(
            f"At position {position}, expected {expected_length} "
            f"bytes{f' for {meaning}' if meaning is not None else ''}"
            f", but the data ends"
        )


class DecodeTransportError(DecodeIOError):
    """
    Raised when the underlying file object fails with an `OSError`. The original error is available as `__cause__`.
    """

    position: int
    meaning: Optional[str]

    def __init__(self, position: int, meaning: Optional[str]):
        self.position = position
        self.meaning = meaning

        super().__init__(
            f"At position {position}, reading{f' {meaning}' if meaning is not None else ''} failed due to an I/O error"
        )


class DecodeDecompressionError(DecodeError):
    """
    Raised when a compressed payload is not a valid stream in the expected compression format.
    """


class DecodeSizeMismatchError(DecodeDecompressionError):
    declared_size: int
    actual_size: int

    def __init__(self, declared_size: int, actual_size: int):
        self.declared_size = declared_size
        self.actual_size = actual_size

        super().__init__(
            f"Compressed section declares {declared_size} uncompressed bytes, but {actual_size} were produced"
        )


class DecodeAllocationLimitError(DecodeError):
    """
    Raised when a count or byte length read from the data implies an unreasonably large allocation. This usually
    indicates corrupt data, but the limits can be raised via `DecodeLimits` if the data is legitimately that large.
    """

    what: str
    requested: int
    limit: int

    def __init__(self, what: str, requested: int, limit: int):
        self.what = what
        self.requested = requested
        self.limit = limit

        super().__init__(f"The {what} ({requested}) exceeds the configured limit of {limit}")


class DecodeMisalignedRecordError(DecodeError):
    """
    Raised when a record in a padded record stream occupies an odd number of bytes, in which case the 2-byte alignment
    correction cannot restore 4-byte alignment.
    """

    position: int
    consumed: int

    def __init__(self, position: int, consumed: int):
        self.position = position
        self.consumed = consumed

        super().__init__(
            f"Record at region offset {position} occupies {consumed} bytes, which is not a multiple of 2, so it "
            f"cannot be realigned to a 4-byte boundary"
        )
