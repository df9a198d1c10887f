#!/usr/bin/env python3
"""
fetch_resource.py - Download a project resource (Google Drive links supported).

Usage:
  python scripts/fetch_resource.py "https://drive.google.com/file/d/<id>/view" --output guide.pdf
  python scripts/fetch_resource.py "https://example.com/guide.pdf" --info
"""

import argparse
import logging
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from phasenav.config import load_settings
from phasenav.errors import ResourceFetchError, UpstreamAccessDenied
from phasenav.resources import fetch_resource, get_resource_info

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="Download a resource, following the Google Drive download flow",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument("url", help="Resource URL")
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Output file (default: last path segment of the URL)"
    )
    parser.add_argument(
        "--info",
        action="store_true",
        help="Only print content type, size and last-modified"
    )
    args = parser.parse_args(argv)

    timeout = load_settings().request_timeout

    try:
        if args.info:
            info = get_resource_info(args.url, timeout=timeout)
            logger.info(f"Content type: {info.content_type}")
            logger.info(f"Size: {info.size}")
            logger.info(f"Last modified: {info.last_modified or 'Unknown'}")
            return 0

        response = fetch_resource(args.url, timeout=timeout)
    except UpstreamAccessDenied as e:
        logger.error(f"{e} Share the file with 'Anyone with the link' and retry.")
        return 2
    except ResourceFetchError as e:
        logger.error(f"Failed to fetch resource: {e}")
        return 1

    output = args.output or Path(response.url.path.rsplit("/", 1)[-1] or "resource.bin")
    output.write_bytes(response.content)
    logger.info(f"Saved {len(response.content)} bytes to: {output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
