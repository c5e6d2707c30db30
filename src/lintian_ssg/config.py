"""ContextVar-based parse configuration for lintian-ssg.

Config is set once per Markdown instance, read by the parsers and the
renderer while a conversion runs.

Thread Safety:
    ContextVars are thread-local by design. Each thread has independent
    storage, so no locks are needed.

Usage:
    with parse_config_context(ParseConfig(html_enabled=True)):
        doc = parser.parse(source)
        html = renderer.render(doc)

"""

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, fields


@dataclass(frozen=True, slots=True)
class ParseConfig:
    """Immutable conversion configuration.

    Attributes:
        html_enabled: Pass raw HTML through to the output instead of
            replacing it with an omission comment
        hard_wraps: Render soft line breaks as <br>
        linkify_enabled: Bare URLs and emails become links (set when the
            linkify plugin is active)

    """

    html_enabled: bool = False
    hard_wraps: bool = False
    linkify_enabled: bool = False

    @classmethod
    def from_dict(cls, config_dict: dict) -> "ParseConfig":
        """Create ParseConfig from dictionary.

        Unknown keys are ignored.

        Example:
            >>> ParseConfig.from_dict({"html_enabled": True, "x": 1}).html_enabled
            True

        """
        valid_fields = {f.name for f in fields(cls)}
        filtered = {k: v for k, v in config_dict.items() if k in valid_fields}
        return cls(**filtered)


# Module-level default config (reused, never recreated)
_DEFAULT_CONFIG: ParseConfig = ParseConfig()

_parse_config: ContextVar[ParseConfig] = ContextVar(
    "lintian_ssg_parse_config",
    default=_DEFAULT_CONFIG,
)


def get_parse_config() -> ParseConfig:
    """Get the active configuration for this thread/context."""
    return _parse_config.get()


def set_parse_config(config: ParseConfig) -> None:
    """Set parse configuration for the current context."""
    _parse_config.set(config)


def reset_parse_config() -> None:
    """Reset to the default configuration."""
    _parse_config.set(_DEFAULT_CONFIG)


@contextmanager
def parse_config_context(config: ParseConfig) -> Iterator[None]:
    """Context manager for temporary config changes.

    Restores the previous config even if an exception is raised.

    Example:
        >>> with parse_config_context(ParseConfig(hard_wraps=True)):
        ...     get_parse_config().hard_wraps
        True

    """
    token = _parse_config.set(config)
    try:
        yield
    finally:
        _parse_config.reset(token)


__all__ = [
    "ParseConfig",
    "get_parse_config",
    "set_parse_config",
    "reset_parse_config",
    "parse_config_context",
]
