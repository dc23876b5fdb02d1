from __future__ import annotations

import re


class RedisError(Exception):
    """
    Base exception from which all other exceptions in respwire
    derive from.
    """


class ConnectionError(RedisError):
    """
    Raised when the transport can no longer be used. Once raised
    the connection it originated from should be discarded.
    """


class EndOfStreamError(ConnectionError):
    """
    Raised when the server closed the connection before the first
    byte of a reply could be read
    """


class ProtocolError(ConnectionError):
    """
    Raised on errors related to ser/deser protocol parsing. The byte
    alignment of the stream can not be trusted after this is raised.
    """


class InvalidResponse(ProtocolError):
    """
    Raised when a reply starts with a byte that is not a known
    RESP marker
    """

    def __init__(self, marker: int, message: str | None = None) -> None:
        #: The offending marker byte
        self.marker = marker
        super().__init__(message or f"Protocol Error: unexpected marker {bytes([marker])!r}")


class InvalidSizeError(ProtocolError):
    """
    Raised when a bulk string length or array count is negative
    (other than the null marker) or exceeds the configured cap
    """

    def __init__(self, size: int, message: str | None = None) -> None:
        self.size = size
        super().__init__(message or f"Invalid size: {size}")


class TimeoutError(RedisError):
    pass


class DataError(RedisError, ValueError):
    """
    Raised when a reply can not be converted to the requested
    python value, or when command arguments are invalid
    """


class ReplyTypeError(DataError, TypeError):
    """
    Raised when an interpretation helper is applied to a reply
    of an incompatible kind
    """


class ResponseError(RedisError):
    """
    Raised when the server answers a command with an error reply.
    The connection remains usable.
    """

    def __init__(self, message: str, command: str | None = None) -> None:
        #: Error text as sent by the server
        self.message = message
        #: Name of the command that resulted in the error
        self.command = command
        super().__init__(f"{command}: {message}" if command else message)


class UnknownCommandError(ResponseError):
    """
    Raised when the server returns an error response relating
    to an unknown command.
    """

    ERROR_REGEX = re.compile("unknown command [`'](.*?)[`']")

    def __init__(self, message: str, command: str | None = None) -> None:
        command_match = self.ERROR_REGEX.findall(message)
        #: Name of command as echoed back by the server
        self.unknown_command: str | None = command_match.pop() if command_match else None
        super().__init__(message, command)


class WrongTypeError(ResponseError):
    """
    Raised when an operation is performed on a key
    containing a datatype that doesn't support the operation
    """


class BusyLoadingError(ResponseError):
    """
    Raised when the server is still loading its dataset
    """


class ReadOnlyError(ResponseError):
    pass


class NoScriptError(ResponseError):
    pass


class AuthenticationError(ResponseError):
    """
    Base class for authentication errors
    """


class AuthenticationFailureError(AuthenticationError):
    """
    Raised when authentication parameters were provided
    but were invalid
    """


class AuthenticationRequiredError(AuthenticationError):
    """
    Raised when authentication parameters are required
    but not provided
    """


class AuthorizationError(ResponseError):
    """
    Raised when the authenticated user lacks the permission
    to run a command
    """
