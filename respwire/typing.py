from __future__ import annotations

from collections.abc import Iterator
from typing import ClassVar, Final, Union

from typing_extensions import NotRequired, Self, TypedDict, Unpack

#: Represents the acceptable types of a redis key
KeyT = Union[str, bytes]

#: Represents the different python primitives that are accepted
#: as command arguments. These are encoded using the configured
#: encoding before being transmitted.
ValueT = Union[str, bytes, int, float]

#: The canonical type used for input parameters that represent "strings"
#: that are transmitted to redis.
StringT = Union[str, bytes]

__all__ = [
    "ClassVar",
    "Final",
    "Iterator",
    "KeyT",
    "NotRequired",
    "Self",
    "StringT",
    "TypedDict",
    "Unpack",
    "ValueT",
]
