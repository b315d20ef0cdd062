"""
The Decodable capability: a uniform way of saying "produce a value of this type by consuming bytes from a reader".

A *decodable type* is any of:

- An instance of a `DecodableSpec` subclass, e.g. the primitive types `U8` ... `F64`, or collection specs like
  ``FixedArray(U16, 3)``
- A class registered via `register_decoder` (this is what `schema.decodable_struct` does for its classes)
- A subclass of `Decodable`, i.e. a class with a ``decode(cls, reader)`` classmethod

All of them are decoded through the `decode` function.
"""

import struct

from abc import ABCMeta, abstractmethod
from typing import Any, Callable, Dict, Optional, Type, TypeVar, Union

from .ByteReader import ByteReader, ReaderLike, ensure_reader


T = TypeVar('T')


class Decodable(metaclass=ABCMeta):
    """
    Base class for composite types that know how to decode themselves.

    Implementations should decode each of their fields in declaration order, by calling `decode` (or one of the other
    entry points) on the reader, and assemble the result.
    """

    @classmethod
    @abstractmethod
    def decode(cls: Type[T], reader: ByteReader) -> T:
        raise NotImplementedError


class DecodableSpec(metaclass=ABCMeta):
    """
    Base class for objects that describe how to decode a value, as opposed to being the value's class themselves.
    """

    @abstractmethod
    def decode(self, reader: ByteReader) -> Any:
        raise NotImplementedError


DecodableType = Union[DecodableSpec, type]
DecodeFunction = Callable[[ByteReader], Any]


_REGISTRY: Dict[type, DecodeFunction] = dict()


def register_decoder(cls: type, decode_function: DecodeFunction):
    """
    Registers a function that decodes values of class `cls`, so that `cls` can be used as a decodable type anywhere.

    Registering a class a second time replaces the previous function.
    """
    _REGISTRY[cls] = decode_function


def is_decodable_type(decodable_type: Any) -> bool:
    if isinstance(decodable_type, DecodableSpec):
        return True
    if not isinstance(decodable_type, type):
        return False

    return (decodable_type in _REGISTRY) or issubclass(decodable_type, Decodable)


def decode(reader: ReaderLike, decodable_type: DecodableType) -> Any:
    """
    Decodes one value of the given decodable type.

    Args:
        reader: The reader to consume bytes from (or bytes/a file object, which will be wrapped in one).
        decodable_type: A primitive type, a spec object or a decodable class.

    Returns:
        The decoded value.

    Raises:
        TypeError: If `decodable_type` is not a decodable type at all.
        DecodeError: Any subclass, if the data is short or malformed.
    """

    reader = ensure_reader(reader)

    if isinstance(decodable_type, DecodableSpec):
        return decodable_type.decode(reader)

    if isinstance(decodable_type, type):
        decode_function = _REGISTRY.get(decodable_type)
        if decode_function is not None:
            return decode_function(reader)

        if issubclass(decodable_type, Decodable):
            return decodable_type.decode(reader)

    raise TypeError(f"{decodable_type!r} is not a decodable type")


class PrimitiveType(DecodableSpec):
    """
    A fixed-width little-endian numeric type. Decoding consumes exactly `size` bytes.
    """

    name: str
    struct_format: str
    size: int

    def __init__(self, name: str, struct_format: str):
        self.name = name
        self.struct_format = '<' + struct_format
        self.size = struct.calcsize(self.struct_format)

    def decode(self, reader: ByteReader, meaning: Optional[str] = None) -> Union[int, float]:
        return reader.read_struct(self.struct_format, meaning or self.name)[0]

    def __repr__(self) -> str:
        return self.name.upper()


U8 = PrimitiveType('u8', 'B')
I8 = PrimitiveType('i8', 'b')
U16 = PrimitiveType('u16', 'H')
I16 = PrimitiveType('i16', 'h')
U32 = PrimitiveType('u32', 'I')
I32 = PrimitiveType('i32', 'i')
U64 = PrimitiveType('u64', 'Q')
I64 = PrimitiveType('i64', 'q')
F32 = PrimitiveType('f32', 'f')
F64 = PrimitiveType('f64', 'd')


def read_primitive(
    reader: ReaderLike, primitive_type: PrimitiveType, meaning: Optional[str] = None
) -> Union[int, float]:
    """
    Decodes a single primitive value.

    Raises:
        DecodeIOError: If the stream cannot supply `primitive_type.size` bytes.
    """

    if not isinstance(primitive_type, PrimitiveType):
        raise TypeError(f"Expected a primitive type, got {primitive_type!r}")

    return primitive_type.decode(ensure_reader(reader), meaning)


def skip(reader: ReaderLike, n_bytes: int, meaning: Optional[str] = None):
    """
    Reads and discards exactly `n_bytes`. The stream is never seeked.

    Raises:
        DecodeIOError: If fewer than `n_bytes` are available.
    """
    ensure_reader(reader).skip_bytes(n_bytes, meaning or 'skipped bytes')


class Skip(DecodableSpec):
    """
    Discards a fixed number of bytes. Decodes to None; composite fields of this kind carry no value.
    """

    n_bytes: int

    def __init__(self, n_bytes: int):
        if n_bytes < 0:
            raise ValueError("Number of bytes to skip must be non-negative")

        self.n_bytes = n_bytes

    def decode(self, reader: ByteReader) -> None:
        skip(reader, self.n_bytes)

    def __repr__(self) -> str:
        return f"Skip({self.n_bytes})"
