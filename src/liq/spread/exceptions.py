"""Exceptions for spread estimation.

Only structural problems are raised: price vectors of different lengths,
malformed window specifications and invalid simulator parameters. A window
without enough price movement is not an error; it yields a missing
estimate.
"""

from __future__ import annotations

from typing import Any


class SpreadError(Exception):
    """Base class for errors raised by liq.spread.

    Keyword context is appended to the message, e.g.
    ``open, high, low, close must have the same length (open=4, close=3)``.

    Attributes:
        message: Message without context.
        context: Keyword context given at construction.
    """

    def __init__(self, message: str, **context: Any) -> None:
        self.message = message
        self.context = context
        details = ", ".join(f"{k}={v}" for k, v in context.items())
        super().__init__(f"{message} ({details})" if details else message)


class InputLengthError(SpreadError, ValueError):
    """Raised when open, high, low and close have different lengths.

    Attributes:
        lengths: Length of each price vector, keyed by name.
    """

    def __init__(self, message: str, lengths: dict[str, int]) -> None:
        self.lengths = dict(lengths)
        super().__init__(message, **self.lengths)


class ConfigurationError(SpreadError, ValueError):
    """Raised for a malformed window specification or simulator parameter.

    Attributes:
        parameter: Offending parameter (``width``, ``shift``, ``prob``, ...).
        value: Value that was given.
        valid_range: Description of accepted values, if any.
    """

    def __init__(
        self,
        message: str,
        parameter: str,
        value: Any,
        valid_range: str | None = None,
    ) -> None:
        self.parameter = parameter
        self.value = value
        self.valid_range = valid_range
        context: dict[str, Any] = {"parameter": parameter, "value": value}
        if valid_range is not None:
            context["valid_range"] = valid_range
        super().__init__(message, **context)
