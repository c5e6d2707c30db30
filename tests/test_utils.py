"""Tests for logging and the string builder."""

import io
import logging

from lintian_ssg import BodyFilterReader, Markdown
from lintian_ssg.stringbuilder import StringBuilder
from lintian_ssg.utils.logger import get_logger


class TestGetLogger:
    """Package logger names and debug output."""

    def test_namespaced(self) -> None:
        """Short names are placed under the package logger."""
        assert get_logger("streams").name == "lintian_ssg.streams"

    def test_module_name_kept(self) -> None:
        """Names already in the package are kept."""
        assert get_logger("lintian_ssg.convert").name == "lintian_ssg.convert"
        assert get_logger("lintian_ssg").name == "lintian_ssg"

    def test_stream_transitions_logged(self, caplog) -> None:
        """Marker transitions are logged at debug level."""
        with caplog.at_level(logging.DEBUG, logger="lintian_ssg"):
            BodyFilterReader(io.BytesIO(b"<body>\nx\n</body>\n")).read()
        messages = [record.getMessage() for record in caplog.records]
        assert "start marker found" in messages
        assert "end marker found" in messages

    def test_code_block_opening_logged(self, caplog) -> None:
        """Opening a code block logs its width."""
        with caplog.at_level(logging.DEBUG, logger="lintian_ssg"):
            Markdown(plugins=["indented_code"])("  code\n")
        assert any("width 2" in record.getMessage() for record in caplog.records)


class TestStringBuilder:
    """List-backed string accumulation."""

    def test_build(self) -> None:
        """Appended pieces are joined in order."""
        sb = StringBuilder()
        sb.append("<p>")
        sb.append("")
        sb.append_line("</p>")
        sb.append_line()
        assert sb.build() == "<p></p>\n\n"

    def test_truthiness(self) -> None:
        """An empty builder is falsy."""
        sb = StringBuilder()
        assert not sb
        sb.append("x")
        assert sb
