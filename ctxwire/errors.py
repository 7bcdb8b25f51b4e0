"""ctxwire error hierarchy and exceptions."""

from __future__ import annotations

from typing import Any, Optional


class CtxwireError(Exception):
    """
    Base exception for all ctxwire errors.

    Carries a stage label (``message``) and the underlying ``cause``. The
    cause is wrapped, not replaced, so callers can still test for it through
    ``unwrap()``, ``root_cause`` or the ``__cause__`` chain.
    """

    def __init__(self, message: str, cause: Optional[BaseException] = None, details: dict = None):
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.details = details or {}
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        text = self.message
        if self.cause is not None:
            text = f"{text}: {self.cause}"
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{text} ({details_str})"
        return text

    def unwrap(self) -> Optional[BaseException]:
        """Return the wrapped cause, if any."""
        return self.cause

    @property
    def root_cause(self) -> BaseException:
        """Follow the wrapped causes down to the original exception."""
        err: BaseException = self
        while isinstance(err, CtxwireError) and err.cause is not None:
            err = err.cause
        return err


class ConfigError(CtxwireError):
    """Raised when a propagator or the registry is misconfigured."""
    pass


class PropagationError(CtxwireError):
    """Raised when a single propagator fails to carry its value."""

    @property
    def propagator(self) -> Optional[str]:
        return self.details.get("propagator")


class EncodeError(PropagationError):
    """Raised when an encoder fails on a present context value."""
    pass


class DecodeError(PropagationError):
    """Raised when a decoder rejects a received payload."""
    pass


class WireFormatError(DecodeError):
    """Raised when a header value is not valid base64."""
    pass


class InjectError(CtxwireError):
    """Raised when the registry fails to inject context values."""
    pass


class ExtractError(CtxwireError):
    """
    Raised when the registry fails to extract context values.

    When raised by a transport, ``response`` holds the response of the
    exchange, which itself succeeded.
    """

    def __init__(
        self,
        message: str,
        cause: Optional[BaseException] = None,
        details: dict = None,
        response: Any = None,
    ):
        super().__init__(message, cause=cause, details=details)
        self.response = response
