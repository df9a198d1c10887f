"""
ContentLoader - Fetch module documents and extract their content region.

Provides:
- HTTP GET of module documents (httpx)
- Extraction of the `.content-body` region (falling back to <body>)
- A per-session content cache
"""

import logging
from typing import Optional

import httpx

from phasenav.errors import ContentFetchFailure
from phasenav.utils.html_fragments import extract_region

logger = logging.getLogger(__name__)

DEFAULT_REGION_CLASS = "content-body"
DEFAULT_TIMEOUT = 30.0


class ContentCache:
    """
    Module id -> rendered fragment, for the lifetime of one navigator.

    Unbounded and never expires: a phase has a handful of modules and a
    navigator lives for one page session, so entries are only dropped when
    the navigator is rebuilt (or `clear` is called).
    """

    def __init__(self):
        self._entries: dict[str, str] = {}

    def get(self, module_id: str) -> Optional[str]:
        return self._entries.get(module_id)

    def put(self, module_id: str, fragment: str):
        self._entries[module_id] = fragment

    def clear(self):
        self._entries.clear()

    def __contains__(self, module_id: str) -> bool:
        return module_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)


class ContentLoader:
    """
    Load module content over HTTP.

    Owns its httpx.Client unless one is passed in.
    """

    def __init__(
        self,
        client: Optional[httpx.Client] = None,
        region_class: str = DEFAULT_REGION_CLASS,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        """
        Initialize loader.

        Args:
            client: Shared httpx client (default: a new client with `timeout`)
            region_class: Class name of the element holding module content
            timeout: Request timeout in seconds for the owned client
        """
        self._owns_client = client is None
        self.client = client or httpx.Client(timeout=timeout, follow_redirects=True)
        self.region_class = region_class

    def fetch_document(self, url: str, source_file: str) -> str:
        """
        GET a module document.

        Raises:
            ContentFetchFailure: On network errors and non-success statuses
        """
        logger.debug(f"Fetching {url}")
        try:
            response = self.client.get(url)
        except httpx.HTTPError as e:
            raise ContentFetchFailure(source_file, str(e) or e.__class__.__name__) from e

        if not response.is_success:
            raise ContentFetchFailure(
                source_file, f"HTTP {response.status_code} {response.reason_phrase}".strip()
            )
        return response.text

    def load_fragment(self, url: str, source_file: str) -> str:
        """
        Fetch a document and return the inner markup of its content region.

        Raises:
            ContentFetchFailure: If fetching fails or the document is empty
        """
        document = self.fetch_document(url, source_file)
        region = extract_region(document, self.region_class)
        if region.source != "region":
            logger.debug(f"No .{self.region_class} in {source_file}, using {region.source}")
        if not region.markup.strip():
            raise ContentFetchFailure(source_file, "document has no content")
        return region.markup

    def close(self):
        if self._owns_client:
            self.client.close()

    def __enter__(self) -> "ContentLoader":
        return self

    def __exit__(self, *exc_info):
        self.close()
