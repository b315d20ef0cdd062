"""
Reflection-based generation of composite decoders.

Declare a composite type as a class whose fields say how each one is decoded, and decorate it with `decodable_struct`::

    @decodable_struct
    class Vertex:
        position: Tuple[float, float, float] = decoded(FixedArray(F32, 3))
        bone_ids: List[int] = decoded(LengthPrefixedList(U8))
        _reserved: None = skipped(2)
        flags: int = decoded(U16)

The class becomes a dataclass that can be used as a decodable type anywhere (e.g. ``read_list(reader, Vertex)``) or
decoded directly with ``Vertex.decode(reader)``. Fields are decoded strictly in declaration order. Skipped fields
consume their bytes but carry no value, and are left out of the constructor, `repr` and comparisons.

This module only calls the public decoding entry points; nothing in the rest of the package depends on it.
"""

import dataclasses

from typing import Any, Callable, List, Optional, Tuple, Type, TypeVar

from .ByteReader import ByteReader, ReaderLike, ensure_reader
from .decodable import DecodableType, Skip, decode, is_decodable_type, register_decoder


T = TypeVar('T')

_DECODE_KIND_KEY = 'binary_decode_kind'


def decoded(kind: DecodableType) -> Any:
    """
    Declares a composite field that is decoded as the given decodable type.
    """

    if not is_decodable_type(kind):
        raise TypeError(f"{kind!r} is not a decodable type")

    return dataclasses.field(metadata={_DECODE_KIND_KEY: kind})


def skipped(n_bytes: int) -> Any:
    """
    Declares a placeholder field for `n_bytes` of data that are skipped over.
    """
    return dataclasses.field(
        default=None, init=False, repr=False, compare=False, metadata={_DECODE_KIND_KEY: Skip(n_bytes)}
    )


def decodable_struct(cls: Optional[Type[T]] = None, *, frozen: bool = False) -> Any:
    """
    Class decorator that turns `cls` into a dataclass with a generated decoder.

    Can be used either bare (``@decodable_struct``) or with options (``@decodable_struct(frozen=True)``). If the class
    is already a dataclass, it is used as is and `frozen` is ignored.

    Raises:
        TypeError: If any field is declared without `decoded` or `skipped`.
    """

    def _decorate(cls_: Type[T]) -> Type[T]:
        if not dataclasses.is_dataclass(cls_):
            cls_ = dataclasses.dataclass(frozen=frozen)(cls_)

        decode_function = _compile_decoder(cls_, _get_field_plan(cls_))

        register_decoder(cls_, decode_function)
        cls_.decode = classmethod(lambda _cls, reader: decode_function(ensure_reader(reader)))

        return cls_

    return _decorate if cls is None else _decorate(cls)


def _get_field_plan(cls: type) -> List[Tuple[str, DecodableType]]:
    plan = []

    for field in dataclasses.fields(cls):
        kind = field.metadata.get(_DECODE_KIND_KEY)
        if kind is None:
            raise TypeError(
                f"Field '{field.name}' of {cls.__name__} does not specify how it is decoded "
                f"(use decoded() or skipped())"
            )

        plan.append((field.name, kind))

    return plan


def _compile_decoder(cls: Type[T], plan: List[Tuple[str, DecodableType]]) -> Callable[[ByteReader], T]:
    def _decode(reader: ByteReader) -> T:
        values = dict()

        for name, kind in plan:
            value = decode(reader, kind)

            if not isinstance(kind, Skip):
                values[name] = value

        return cls(**values)

    _decode.__name__ = f"decode_{cls.__name__}"
    _decode.__qualname__ = _decode.__name__

    return _decode


def decode_struct(reader: ReaderLike, cls: Type[T]) -> T:
    """
    Decodes an instance of a class decorated with `decodable_struct`.
    """

    if not dataclasses.is_dataclass(cls) or not is_decodable_type(cls):
        raise TypeError(f"{cls!r} is not a decodable struct")

    return decode(reader, cls)
