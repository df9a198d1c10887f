"""
Drive resources - Download files shared through Google Drive links.

Drive has no public download API for shared links. A download takes up to
three requests:

1. GET the `uc?export=download` URL without following redirects
2. On 301/302, replay against the Location with the returned cookies
3. If an HTML interstitial comes back, replay once with its confirm token

Other hosts are fetched directly with browser-like headers.
"""

import logging
import re
from contextlib import contextmanager
from typing import Iterator, Optional
from urllib.parse import parse_qs, urlsplit

import httpx
from pydantic import BaseModel

from phasenav.errors import ResourceFetchError, UpstreamAccessDenied

logger = logging.getLogger(__name__)

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/117.0.0.0 Safari/537.36"
)
DRIVE_HOSTS = ["drive.google.com", "docs.google.com", "drive.googleusercontent.com"]
DRIVE_REFERER = "https://drive.google.com/"
DEFAULT_TIMEOUT = 30.0

_ID = r"([a-zA-Z0-9_-]+)"
_FILE_PATH = re.compile(rf"/file/d/{_ID}")
_DOCUMENT_PATH = re.compile(rf"/(?:document|presentation|spreadsheets)/d/{_ID}")
_GENERIC_PATH = re.compile(rf"/d/{_ID}")
_ID_QUERY = re.compile(rf"[?&]id={_ID}")
_CONFIRM_TOKEN = re.compile(r"confirm=([0-9A-Za-z_]+)&")
_ACCESS_DENIED = re.compile(r"You need access|Sign in|Google Drive", re.IGNORECASE)


class ResourceInfo(BaseModel):
    """Metadata of a reachable resource."""

    url: str
    accessible: bool = True
    content_type: Optional[str] = None
    content_length: Optional[int] = None
    last_modified: Optional[str] = None
    size: str = "Unknown"


def build_headers(extra: Optional[dict] = None) -> dict:
    """Browser-like request headers, merged with `extra`."""
    headers = {
        "User-Agent": USER_AGENT,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.9",
    }
    if extra:
        headers.update(extra)
    return headers


def is_drive_host(hostname: Optional[str]) -> bool:
    return hostname in DRIVE_HOSTS


def extract_drive_file_id(raw_url: str) -> Optional[str]:
    """
    Find the file id in a Drive or Docs link.

    Understands `/file/d/<id>`, `/document|presentation|spreadsheets/d/<id>`,
    an `id=` query parameter and links wrapped in a `url=` parameter.

    Returns:
        File id, or None when the link has none
    """
    if not raw_url:
        return None

    url = raw_url
    wrapped = parse_qs(urlsplit(raw_url).query).get("url")
    if wrapped:
        url = wrapped[0]

    parts = urlsplit(url)
    for pattern in (_FILE_PATH, _DOCUMENT_PATH):
        match = pattern.search(parts.path)
        if match:
            return match.group(1)

    ids = parse_qs(parts.query).get("id")
    if ids:
        return ids[0]

    match = _GENERIC_PATH.search(parts.path) or _ID_QUERY.search(url) or _GENERIC_PATH.search(url)
    return match.group(1) if match else None


def drive_download_url(file_id: str, confirm_token: Optional[str] = None) -> str:
    url = f"https://drive.google.com/uc?export=download&id={file_id}"
    if confirm_token:
        url += f"&confirm={confirm_token}"
    return url


def normalize_drive_location(location: Optional[str]) -> Optional[str]:
    """Make a redirect Location absolute against drive.google.com."""
    if not location:
        return None
    if location.startswith(("http://", "https://")):
        return location
    if location.startswith("//"):
        return f"https:{location}"
    return f"https://drive.google.com{location}"


def collect_cookies(set_cookie_headers: list[str]) -> Optional[str]:
    """Fold Set-Cookie headers into one Cookie header value."""
    if not set_cookie_headers:
        return None
    return "; ".join(header.split(";")[0] for header in set_cookie_headers)


def _cookie_header(response: httpx.Response) -> dict:
    cookies = collect_cookies(response.headers.get_list("set-cookie"))
    return {"Cookie": cookies} if cookies else {}


@contextmanager
def _client_scope(client: Optional[httpx.Client], timeout: float) -> Iterator[httpx.Client]:
    if client is not None:
        yield client
        return
    with httpx.Client(timeout=timeout) as owned:
        yield owned


def _get(client: httpx.Client, url: str, headers: dict, follow_redirects: bool) -> httpx.Response:
    try:
        return client.get(url, headers=headers, follow_redirects=follow_redirects)
    except httpx.HTTPError as e:
        raise ResourceFetchError(f"Request to {url} failed: {e}") from e


def fetch_drive_file(
    file_id: str,
    client: Optional[httpx.Client] = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> httpx.Response:
    """
    Download a Drive file by id.

    Raises:
        UpstreamAccessDenied: If Drive answers with a sign-in or access page
        ResourceFetchError: On other HTML answers or a non-success status
    """
    if not file_id:
        raise ResourceFetchError("Unable to determine Google Drive file ID")

    base_headers = build_headers({"Referer": DRIVE_REFERER})

    with _client_scope(client, timeout) as http:
        response = _get(http, drive_download_url(file_id), base_headers, follow_redirects=False)

        if response.status_code in (301, 302):
            location = normalize_drive_location(response.headers.get("location"))
            if location is None:
                raise ResourceFetchError("Google Drive redirect without a Location header")
            logger.debug(f"Drive redirect for {file_id} -> {location}")
            response = _get(http, location, {**base_headers, **_cookie_header(response)}, follow_redirects=True)

        if "text/html" in response.headers.get("content-type", ""):
            match = _CONFIRM_TOKEN.search(response.text)
            if match:
                logger.debug(f"Drive confirm token for {file_id}")
                response = _get(
                    http,
                    drive_download_url(file_id, match.group(1)),
                    {**base_headers, **_cookie_header(response)},
                    follow_redirects=True,
                )
            elif _ACCESS_DENIED.search(response.text):
                raise UpstreamAccessDenied("Google Drive requires authentication to access this file.")
            else:
                raise ResourceFetchError("Unexpected HTML response from Google Drive.")

    if not response.is_success:
        raise ResourceFetchError(
            f"Failed to download Google Drive file: {response.status_code} {response.reason_phrase}"
        )
    return response


def fetch_resource(
    raw_url: str,
    client: Optional[httpx.Client] = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> httpx.Response:
    """
    Fetch a resource, routing Drive links through the download flow.

    Args:
        raw_url: Absolute URL of the resource
        client: Shared httpx client (default: a short-lived one)
        timeout: Request timeout in seconds for the short-lived client

    Returns:
        Successful httpx.Response with the body read

    Raises:
        ResourceFetchError: Invalid URL, network failure or non-success status
        UpstreamAccessDenied: Drive file not shared publicly
    """
    parts = urlsplit(raw_url or "")
    if not parts.scheme or not parts.netloc:
        raise ResourceFetchError("Invalid resource URL")

    if is_drive_host(parts.hostname):
        file_id = extract_drive_file_id(raw_url)
        if file_id:
            return fetch_drive_file(file_id, client=client, timeout=timeout)
        wrapped = parse_qs(parts.query).get("url")
        if wrapped:
            return fetch_resource(wrapped[0], client=client, timeout=timeout)

    with _client_scope(client, timeout) as http:
        response = _get(http, raw_url, build_headers(), follow_redirects=True)

    if not response.is_success:
        raise ResourceFetchError(
            f"Failed to fetch resource: {response.status_code} {response.reason_phrase}"
        )
    logger.info(f"Fetched resource: {raw_url}")
    return response


def format_size(content_length: Optional[int]) -> str:
    if content_length is None:
        return "Unknown"
    return f"{content_length / 1024 / 1024:.2f} MB"


def get_resource_info(
    raw_url: str,
    client: Optional[httpx.Client] = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> ResourceInfo:
    """
    Describe a resource without keeping its body.

    Raises:
        ResourceFetchError: If the resource is not accessible
    """
    response = fetch_resource(raw_url, client=client, timeout=timeout)
    length = response.headers.get("content-length")
    content_length = int(length) if length and length.isdigit() else None
    return ResourceInfo(
        url=raw_url,
        content_type=response.headers.get("content-type"),
        content_length=content_length,
        last_modified=response.headers.get("last-modified"),
        size=format_size(content_length),
    )
