from __future__ import annotations

import os

#: Largest bulk string length accepted from the wire
DEFAULT_MAX_BULK_SIZE: int = 2**31 - 1 - 8
#: Deepest array nesting accepted from the wire
DEFAULT_MAX_NESTING_DEPTH: int = 512


def _int_from_env(name: str, default: int) -> int:
    value = os.environ.get(name, "").strip()
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}") from None


class __Config:
    def __init__(self) -> None:
        self.__max_nesting_depth: int | None = None
        self.__max_bulk_size: int | None = None

    @property
    def max_nesting_depth(self) -> int:
        """
        Maximum depth of nested array replies the decoder will accept before
        treating the stream as malformed.
        Can be set with the environment variable ``RESPWIRE_MAX_NESTING_DEPTH``
        or by explicitly setting ``respwire.Config.max_nesting_depth``
        """
        if self.__max_nesting_depth is not None:
            return self.__max_nesting_depth
        return _int_from_env("RESPWIRE_MAX_NESTING_DEPTH", DEFAULT_MAX_NESTING_DEPTH)

    @max_nesting_depth.setter
    def max_nesting_depth(self, value: int | None) -> None:
        if value is not None and value < 1:
            raise ValueError("max_nesting_depth must be at least 1")
        self.__max_nesting_depth = value

    @property
    def max_bulk_size(self) -> int:
        """
        Upper bound for the declared length of a bulk reply. Values above
        the default are clamped since they could never be allocated.
        Can be lowered with the environment variable ``RESPWIRE_MAX_BULK_SIZE``
        or by explicitly setting ``respwire.Config.max_bulk_size``
        """
        if self.__max_bulk_size is not None:
            value = self.__max_bulk_size
        else:
            value = _int_from_env("RESPWIRE_MAX_BULK_SIZE", DEFAULT_MAX_BULK_SIZE)
        return min(value, DEFAULT_MAX_BULK_SIZE)

    @max_bulk_size.setter
    def max_bulk_size(self, value: int | None) -> None:
        if value is not None and value < 0:
            raise ValueError("max_bulk_size must not be negative")
        self.__max_bulk_size = value


#: Used to configure global behaviors of the respwire library
Config = __Config()
