"""Tests for ContextVar-based parse configuration.

Validates thread isolation, context manager behavior, and that a Markdown
instance applies its own configuration only while it is converting.
"""

from threading import Thread

import pytest

from lintian_ssg import (
    AutoLink,
    Document,
    LinkifyPlugin,
    Markdown,
    ParseConfig,
    ParserBuilder,
    get_parse_config,
    parse_config_context,
    reset_parse_config,
    set_parse_config,
)


class TestParseConfigDataclass:
    """Test ParseConfig frozen dataclass behavior."""

    def test_default_values(self) -> None:
        """Default config passes no raw HTML and keeps soft breaks."""
        config = ParseConfig()
        assert config.html_enabled is False
        assert config.hard_wraps is False
        assert config.linkify_enabled is False

    def test_immutability(self) -> None:
        """Config is frozen and cannot be modified."""
        config = ParseConfig()
        with pytest.raises(AttributeError):
            config.html_enabled = True  # type: ignore[misc]

    def test_from_dict_ignores_unknown_keys(self) -> None:
        """Keys that are not config fields are dropped."""
        config = ParseConfig.from_dict({"hard_wraps": True, "tables_enabled": True})
        assert config == ParseConfig(hard_wraps=True)


class TestContextVarFunctions:
    """Test get/set/reset functions."""

    def teardown_method(self) -> None:
        """Reset config after each test."""
        reset_parse_config()

    def test_set_and_get(self) -> None:
        """A set config is returned by get."""
        set_parse_config(ParseConfig(html_enabled=True))
        assert get_parse_config().html_enabled is True

    def test_reset(self) -> None:
        """Reset restores the defaults."""
        set_parse_config(ParseConfig(html_enabled=True))
        reset_parse_config()
        assert get_parse_config() == ParseConfig()

    def test_context_manager_restores(self) -> None:
        """Previous config comes back even after an exception."""
        outer = ParseConfig(hard_wraps=True)
        set_parse_config(outer)
        with pytest.raises(RuntimeError):
            with parse_config_context(ParseConfig(html_enabled=True)):
                assert get_parse_config().html_enabled is True
                raise RuntimeError("boom")
        assert get_parse_config() is outer

    def test_thread_isolation(self) -> None:
        """A config set in one thread is invisible to another."""
        seen: list[ParseConfig] = []
        set_parse_config(ParseConfig(html_enabled=True))

        thread = Thread(target=lambda: seen.append(get_parse_config()))
        thread.start()
        thread.join()

        assert seen == [ParseConfig()]


class TestMarkdownConfig:
    """Markdown instances carry their own configuration."""

    def teardown_method(self) -> None:
        """Reset config after each test."""
        reset_parse_config()

    def test_instance_config(self) -> None:
        """Options and plugins end up in the instance config."""
        md = Markdown(plugins=["linkify"], html_enabled=True, hard_wraps=True)
        assert md.config == ParseConfig(html_enabled=True, hard_wraps=True, linkify_enabled=True)
        assert md.plugins == ("linkify",)

    def test_config_only_active_during_call(self) -> None:
        """The instance config is gone once the call returns."""
        md = Markdown(html_enabled=True)
        assert md("a <b>c</b>") == "<p>a <b>c</b></p>\n"
        assert get_parse_config() == ParseConfig()

    def test_outer_config_does_not_leak_in(self) -> None:
        """An instance ignores whatever config the caller has set."""
        md = Markdown()
        with parse_config_context(ParseConfig(html_enabled=True)):
            assert md("a <b>c</b>") == (
                "<p>a <!-- raw HTML omitted -->c<!-- raw HTML omitted --></p>\n"
            )

    def test_linkify_follows_config(self) -> None:
        """The linkify parser stays idle unless the config enables it."""
        builder = ParserBuilder.with_defaults()
        LinkifyPlugin().extend_parser(builder)
        parser = builder.build()

        def has_autolink(doc: Document) -> bool:
            return any(isinstance(child, AutoLink) for child in doc.children[0].children)

        assert not has_autolink(parser.parse("see https://x.org"))
        with parse_config_context(ParseConfig(linkify_enabled=True)):
            assert has_autolink(parser.parse("see https://x.org"))
