"""
Error taxonomy for the Jingui Admin data layer.

Every failure that leaves the transport is one of four kinds:

  Unconfigured       no credential pair stored; raised before any request
  NetworkFailure     the HTTP exchange could not be completed
  RemoteError        the server answered with a non-success status
  MalformedResponse  success status, but the body was not what we expected

Callers render any of them with describe_error().
"""

from __future__ import annotations


class JinguiError(Exception):
    """Base class for all data-layer failures."""

    @property
    def message(self) -> str:
        return str(self.args[0]) if self.args else self.__class__.__name__


class Unconfigured(JinguiError):
    """No endpoint/token pair is stored; the caller should ask for one."""

    def __init__(self, message: str = "API not configured") -> None:
        super().__init__(message)


class NetworkFailure(JinguiError):
    """The transport could not complete the request/response exchange."""


class RemoteError(JinguiError):
    """The server responded with a non-success HTTP status."""

    def __init__(self, message: str, status: int, hint: str | None = None) -> None:
        super().__init__(message)
        self.status = status
        self.hint = hint

    def __repr__(self) -> str:
        return f"RemoteError({self.message!r}, status={self.status}, hint={self.hint!r})"


class MalformedResponse(JinguiError):
    """The server answered successfully but the body did not parse."""


def describe_error(exc: BaseException) -> str:
    """Return a human-readable one-line message for a failure."""
    if isinstance(exc, RemoteError):
        if exc.hint:
            return f"{exc.message} ({exc.hint})"
        return exc.message
    if isinstance(exc, Unconfigured):
        return f"{exc.message}. Run 'jingui-admin configure' first."
    if isinstance(exc, NetworkFailure):
        return f"Network error: {exc.message}"
    if isinstance(exc, MalformedResponse):
        return f"Unexpected response: {exc.message}"
    return str(exc) or exc.__class__.__name__
