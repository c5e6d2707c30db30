"""lintian-ssg renderers.

Renderers convert document trees into output formats.

Available Renderers:
- HtmlRenderer: dispatches node classes to registered render functions

Thread Safety:
All renderers use a StringBuilder local to each render() call.
Safe for concurrent use from multiple threads.

"""

from lintian_ssg.renderers.html import HtmlRenderer, RenderContext, RenderFunc

__all__ = ["HtmlRenderer", "RenderContext", "RenderFunc"]
