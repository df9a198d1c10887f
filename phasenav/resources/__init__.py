"""
PhaseNav Resources - Retrieval of externally hosted project files.
"""

from .drive import (
    DRIVE_HOSTS,
    ResourceInfo,
    collect_cookies,
    drive_download_url,
    extract_drive_file_id,
    fetch_drive_file,
    fetch_resource,
    get_resource_info,
    normalize_drive_location,
)

__all__ = [
    "DRIVE_HOSTS",
    "ResourceInfo",
    "collect_cookies",
    "drive_download_url",
    "extract_drive_file_id",
    "fetch_drive_file",
    "fetch_resource",
    "get_resource_info",
    "normalize_drive_location",
]
