"""Thread safety tests for conversion.

Converters are shared between threads by the site generator. These tests
verify that:
1. Concurrent conversions give the same output as sequential ones
2. Instances with different configurations do not leak settings into each other
3. Body extraction can run on many streams at once
"""

import io
from concurrent.futures import ThreadPoolExecutor

from lintian_ssg import BodyFilterReader, Markdown, Style, to_html

SOURCES = [
    f"Tag {i} mentions lintian({i % 9 + 1}) and Bug#{1000 + i}.\n"
    "\n"
    f"  $ lintian --tags tag-{i} foo.changes\n"
    "\n"
    f"- see https://lintian.debian.org/tags/tag-{i}\n"
    f"- `code {i}` and <code>dpkg({i % 9 + 1})</code>\n"
    for i in range(64)
]


class TestConcurrentConversion:
    """Conversions running in a thread pool."""

    def test_full_style_matches_sequential(self) -> None:
        """Pooled conversions equal one-by-one conversions."""
        expected = [to_html(source, Style.FULL) for source in SOURCES]
        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda s: to_html(s, Style.FULL), SOURCES * 4))
        assert results == expected * 4

    def test_mixed_styles_do_not_interfere(self) -> None:
        """Inline and full conversions interleave without sharing settings."""
        jobs = [(source, style) for source in SOURCES for style in Style]
        expected = [to_html(source, style) for source, style in jobs]
        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda job: to_html(*job), jobs))
        assert results == expected

    def test_shared_instance(self) -> None:
        """One instance serves many threads."""
        md = Markdown(plugins=["all"], html_enabled=True, hard_wraps=True)
        expected = [md(source) for source in SOURCES]
        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(md, SOURCES))
        assert results == expected


class TestConcurrentExtraction:
    """Body extraction running in a thread pool."""

    def test_readers_on_separate_streams(self) -> None:
        """Readers on separate streams do not interfere."""
        pages = [
            b"<html>\n<body>\n" + f"page {i}\n".encode() * 50 + b"</body>\n</html>\n"
            for i in range(32)
        ]

        def extract(page: bytes) -> bytes:
            return BodyFilterReader(io.BytesIO(page), buffer_size=7).read()

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(extract, pages))
        assert results == [f"page {i}\n".encode() * 50 for i in range(32)]
