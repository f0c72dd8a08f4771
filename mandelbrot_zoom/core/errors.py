"""
Exception types raised by the rendering and zoom APIs.

All errors are caller-input errors. They subclass ``ValueError`` so code that
validates input with a plain ``except ValueError`` keeps working.
"""


class MandelbrotZoomError(ValueError):
    """Base class for all package errors."""


class InvalidArgumentError(MandelbrotZoomError):
    """Non-positive pixel dimensions, iteration counts or malformed bounds."""


class InvalidSelectionError(MandelbrotZoomError):
    """A zoom selection with a zero, negative or degenerate size."""


class ConfigError(MandelbrotZoomError):
    """A configuration file or environment override could not be used."""
