"""
HTML fragment helpers - Locate regions of a document by offset.

Works on the raw markup so that everything outside the edited spans is kept
byte-for-byte. Used for extracting the content region of a module document.
"""

from dataclasses import dataclass
from html.parser import HTMLParser
from typing import Optional

VOID_ELEMENTS = {
    "area", "base", "br", "col", "embed", "hr", "img", "input",
    "link", "meta", "param", "source", "track", "wbr",
}


class OffsetHTMLParser(HTMLParser):
    """HTMLParser that can report absolute character offsets."""

    def __init__(self, markup: str):
        super().__init__(convert_charrefs=True)
        self.markup = markup
        self._line_starts = [0]
        for idx, char in enumerate(markup):
            if char == "\n":
                self._line_starts.append(idx + 1)

    def char_offset(self) -> int:
        """Absolute offset of the construct currently being handled."""
        line, col = self.getpos()
        return self._line_starts[line - 1] + col


@dataclass
class _OpenElement:
    tag: str
    inner_start: int
    depth: int = 0


class _RegionFinder(OffsetHTMLParser):
    def __init__(self, markup: str, class_name: str):
        super().__init__(markup)
        self.class_name = class_name
        self.region: Optional[tuple[int, int]] = None
        self.body: Optional[tuple[int, int]] = None
        self._open_region: Optional[_OpenElement] = None
        self._open_body: Optional[_OpenElement] = None

    def handle_starttag(self, tag, attrs):
        start_text = self.get_starttag_text() or ""
        inner_start = self.char_offset() + len(start_text)

        for element in (self._open_region, self._open_body):
            if element is not None and element.tag == tag:
                element.depth += 1

        if tag == "body" and self.body is None and self._open_body is None:
            self._open_body = _OpenElement(tag, inner_start)

        if self.region is None and self._open_region is None and tag not in VOID_ELEMENTS:
            classes = (dict(attrs).get("class") or "").split()
            if self.class_name in classes:
                self._open_region = _OpenElement(tag, inner_start)

    def handle_startendtag(self, tag, attrs):
        # Self-closing tags never change nesting depth.
        pass

    def handle_endtag(self, tag):
        end = self.char_offset()
        if self._open_region is not None and self._open_region.tag == tag:
            if self._open_region.depth == 0:
                self.region = (self._open_region.inner_start, end)
                self._open_region = None
            else:
                self._open_region.depth -= 1
        if self._open_body is not None and tag == "body":
            if self._open_body.depth == 0:
                self.body = (self._open_body.inner_start, end)
                self._open_body = None
            else:
                self._open_body.depth -= 1

    def finish(self) -> None:
        self.close()
        # Unclosed elements run to the end of the document.
        if self._open_region is not None:
            self.region = (self._open_region.inner_start, len(self.markup))
        if self._open_body is not None:
            self.body = (self._open_body.inner_start, len(self.markup))


@dataclass
class ExtractedRegion:
    """Inner markup of the content region and where it came from."""
    markup: str
    source: str  # "region", "body" or "document"


def extract_region(markup: str, class_name: str = "content-body") -> ExtractedRegion:
    """
    Extract the inner markup of the first element carrying `class_name`.

    Falls back to the inner markup of <body>, and to the whole document when
    there is no body element either.
    """
    finder = _RegionFinder(markup, class_name)
    finder.feed(markup)
    finder.finish()

    if finder.region is not None:
        start, end = finder.region
        return ExtractedRegion(markup[start:end], "region")
    if finder.body is not None:
        start, end = finder.body
        return ExtractedRegion(markup[start:end], "body")
    return ExtractedRegion(markup, "document")
