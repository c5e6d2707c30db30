"""Exception classes for lintian-ssg.

Provides standardized exceptions for error handling throughout the package.
Markdown recognizers never raise on malformed input; they decline and let
plainer parsers handle the text. Exceptions are reserved for programming
errors (missing render functions, unknown plugins) and I/O failures.
"""

from __future__ import annotations


class LintianSsgError(Exception):
    """Base exception for all lintian-ssg errors.

    Subclass this for specific error categories.
    """

    pass


class RenderError(LintianSsgError):
    """Error during HTML rendering.

    Raised when the renderer meets a node kind it has no render function for.
    """

    def __init__(self, kind: str, message: str | None = None) -> None:
        """Initialize render error.

        Args:
            kind: Name of the node class that could not be rendered
            message: Optional description (defaults to a missing-function note)
        """
        self.kind = kind
        super().__init__(message or f"no render function registered for {kind}")


class PluginError(LintianSsgError):
    """Error in plugin lookup or registration.

    Raised when a plugin name is unknown or a plugin fails to register.
    """

    def __init__(self, plugin_name: str, message: str) -> None:
        """Initialize plugin error.

        Args:
            plugin_name: Name of the failing plugin
            message: Description of the error
        """
        self.plugin_name = plugin_name
        super().__init__(f"Plugin '{plugin_name}': {message}")


class SourceReadError(LintianSsgError, OSError):
    """The underlying stream of a reader failed.

    ``written`` is the number of bytes already copied into the caller's
    buffer during the failing call. Those bytes are valid and are not
    delivered again. The original exception is chained as ``__cause__``.
    """

    def __init__(self, written: int, message: str) -> None:
        self.written = written
        super().__init__(f"{message} (after {written} bytes)")
