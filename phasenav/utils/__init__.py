"""PhaseNav utilities."""

from .assets import (
    add_token,
    phase_folder_from_path,
    resolve_asset_url,
    rewrite_asset_urls,
    should_rewrite,
)
from .html_fragments import ExtractedRegion, extract_region
from .yaml_loader import dump_yaml, load_yaml

__all__ = [
    "add_token",
    "phase_folder_from_path",
    "resolve_asset_url",
    "rewrite_asset_urls",
    "should_rewrite",
    "ExtractedRegion",
    "extract_region",
    "dump_yaml",
    "load_yaml",
]
