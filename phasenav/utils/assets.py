"""
Asset URL rewriting for gateway-proxied content.

Fragments fetched through the API gateway reference their images, scripts,
stylesheets and links relative to the phase folder they were authored in.
Once injected into another page those references must point back at the
gateway, and each one needs the access token because the browser fetches
them directly (no Authorization header on <img> or <script> requests).

Resolution rules:
- `../x`   -> {api_base}/x (project root; extra `../` cannot climb higher)
- `./x`    -> {api_base}/{phase folder}/x, phase folder read from the page path
- `/x`     -> {api origin}/x
- `x`      -> {api_base}/x
- absolute, protocol-relative, scheme-qualified (data:, mailto:, tel:, ...)
  and fragment-only references are left untouched
"""

import html
import logging
import re
from typing import Optional
from urllib.parse import parse_qsl, urlencode, urljoin, urlsplit, urlunsplit

from .html_fragments import OffsetHTMLParser

logger = logging.getLogger(__name__)

# tag -> attributes carrying a resource reference
ASSET_ATTRIBUTES: dict[str, tuple[str, ...]] = {
    "img": ("src",),
    "source": ("src",),
    "video": ("src",),
    "audio": ("src",),
    "script": ("src",),
    "a": ("href",),
}
STYLESHEET_ATTRIBUTE = "href"
DATA_ATTRIBUTE = "data-image"
GATEWAY_PATH_PREFIX = "/api/realtime-projects/"

_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.\-]*:")
_PARENT_RE = re.compile(r"^(?:\.\./)+")


def should_rewrite(value: Optional[str]) -> bool:
    """Return True for references that point inside the project."""
    if not value:
        return False
    trimmed = value.strip()
    if not trimmed:
        return False
    if trimmed.startswith("#") or trimmed.startswith("//"):
        return False
    return not _SCHEME_RE.match(trimmed)


def phase_folder_from_path(page_path: str, prefix: str = GATEWAY_PATH_PREFIX) -> Optional[str]:
    """
    Read the phase folder segment out of a gateway page path.

    `/api/realtime-projects/ecommerce/BRD_phase/Overview.html` -> `BRD_phase`
    """
    match = re.search(re.escape(prefix) + r"[^/]+/([^/]+)/", page_path)
    return match.group(1) if match else None


def resolve_asset_url(url: str, api_base: str, phase_folder: Optional[str] = None) -> str:
    """Resolve one project-relative reference against the API base."""
    base = api_base.rstrip("/") + "/"
    value = url.strip()

    if value.startswith("../"):
        return base + _PARENT_RE.sub("", value)
    if value.startswith("./"):
        relative = value[2:]
        if phase_folder:
            return base + phase_folder.strip("/") + "/" + relative
        return base + relative
    if value.startswith("/"):
        return urljoin(base, value)
    return base + value


def add_token(url: str, token: Optional[str]) -> str:
    """Append `token` as a query parameter unless the URL already has one."""
    if not token:
        return url
    parts = urlsplit(url)
    if any(key == "token" for key, _ in parse_qsl(parts.query, keep_blank_values=True)):
        return url
    extra = urlencode({"token": token})
    query = f"{parts.query}&{extra}" if parts.query else extra
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


_TAG_NAME = re.compile(r"<[^\s/>]+")
_ATTRIBUTE = re.compile(r"""(\s+)([^\s=/>]+)(?:(\s*=\s*)("[^"]*"|'[^']*'|[^\s>]+))?""")


def _replace_attribute(tag_text: str, name: str, new_value: str) -> str:
    """Replace the value of attribute `name`, matching whole attributes only."""
    tag_name = _TAG_NAME.match(tag_text)
    for match in _ATTRIBUTE.finditer(tag_text, tag_name.end() if tag_name else 0):
        if match.group(2).lower() != name or match.group(4) is None:
            continue
        raw = match.group(4)
        quote = raw[0] if raw[0] in "\"'" else '"'
        value = f"{quote}{html.escape(new_value, quote=True)}{quote}"
        return tag_text[:match.start(4)] + value + tag_text[match.end(4):]
    return tag_text


class _AssetRewriter(OffsetHTMLParser):
    def __init__(self, markup: str, api_base: str, token: Optional[str], phase_folder: Optional[str]):
        super().__init__(markup)
        self.api_base = api_base
        self.token = token
        self.phase_folder = phase_folder
        self.edits: list[tuple[int, str, str]] = []

    def _targets(self, tag: str, attrs: dict[str, Optional[str]]) -> list[str]:
        names = list(ASSET_ATTRIBUTES.get(tag, ()))
        if tag == "link" and "stylesheet" in (attrs.get("rel") or "").lower().split():
            names.append(STYLESHEET_ATTRIBUTE)
        if DATA_ATTRIBUTE in attrs:
            names.append(DATA_ATTRIBUTE)
        return names

    def handle_starttag(self, tag, attrs):
        attr_map = dict(attrs)
        original = self.get_starttag_text() or ""
        rewritten = original
        for name in self._targets(tag, attr_map):
            value = attr_map.get(name)
            if not should_rewrite(value):
                continue
            resolved = add_token(resolve_asset_url(value, self.api_base, self.phase_folder), self.token)
            rewritten = _replace_attribute(rewritten, name, resolved)
        if rewritten != original:
            self.edits.append((self.char_offset(), original, rewritten))

    def handle_startendtag(self, tag, attrs):
        self.handle_starttag(tag, attrs)


def rewrite_asset_urls(
    fragment: str,
    api_base: str,
    token: Optional[str] = None,
    page_path: str = "",
) -> str:
    """
    Rewrite resource references in a fragment to go through the gateway.

    Args:
        fragment: HTML markup of the content region
        api_base: Gateway base, e.g. https://api.example.com/api/realtime-projects/foo
        token: Access token appended to every rewritten reference
        page_path: Path of the hosting page, used to find the phase folder for `./` references

    Returns:
        The fragment with rewritten attributes; all other markup unchanged
    """
    if not api_base:
        return fragment

    parser = _AssetRewriter(fragment, api_base, token, phase_folder_from_path(page_path))
    parser.feed(fragment)
    parser.close()

    result = fragment
    for offset, original, rewritten in reversed(parser.edits):
        if result[offset:offset + len(original)] != original:
            logger.warning(f"Skipping asset rewrite at offset {offset}: markup mismatch")
            continue
        result = result[:offset] + rewritten + result[offset + len(original):]

    logger.debug(f"Rewrote {len(parser.edits)} asset tags against {api_base}")
    return result
