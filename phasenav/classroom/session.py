"""
Session bootstrap - Build a PhaseNavigator for one page session.

Resolves which phase the page belongs to (embedded page data, then the
URL path, then stored progress) and wires the navigator to the configured
deployment mode.
"""

import json
import logging
import re
from typing import Optional, Union
from urllib.parse import unquote, urlsplit

import httpx

from phasenav.config import Settings
from phasenav.schemas import Curriculum

from .catalog import FOLDER_PHASE_NAMES, load_curriculum
from .gateway import GatewayContext
from .loader import ContentLoader
from .navigator import NavigatorConfig, PhaseNavigator
from .progress import ProgressStore

logger = logging.getLogger(__name__)

_PHASE_SUFFIX = re.compile(r"[_ ]?[pP]hase$")


def _phase_from_page_data(page_data: Union[str, dict, None]) -> Optional[str]:
    if page_data is None:
        return None
    if isinstance(page_data, str):
        try:
            page_data = json.loads(page_data)
        except json.JSONDecodeError:
            logger.warning("Ignoring unparseable page data")
            return None
    if not isinstance(page_data, dict):
        return None
    phase = page_data.get("phase")
    return phase if isinstance(phase, str) and phase else None


def _phase_from_segment(segment: str, curriculum: Curriculum) -> Optional[str]:
    definition = curriculum.phase_for_folder(segment)
    if definition is not None:
        return definition.id

    stem = _PHASE_SUFFIX.sub("", segment)
    if stem != segment and stem in FOLDER_PHASE_NAMES:
        return FOLDER_PHASE_NAMES[stem]

    return curriculum.canonical_phase(segment.lower())


def resolve_initial_phase(
    page_data: Union[str, dict, None],
    url_path: str,
    curriculum: Curriculum,
    fallback: Optional[str] = None,
) -> Optional[str]:
    """
    Determine the phase a page belongs to.

    Order: `{"phase": ...}` page data, then the first path segment naming a
    phase folder (e.g. 'BRD_phase', 'Development Phase'), then `fallback`.
    Aliases are normalized, so 'code-development' yields 'development'.

    Returns:
        Canonical phase id, or None if nothing matched
    """
    phase = _phase_from_page_data(page_data)
    if phase is not None:
        canonical = curriculum.canonical_phase(phase)
        if canonical is not None:
            return canonical
        logger.warning(f"Unknown phase in page data: {phase}")

    for segment in unquote(url_path).split("/"):
        if not segment:
            continue
        canonical = _phase_from_segment(segment, curriculum)
        if canonical is not None:
            return canonical

    if fallback is not None:
        return curriculum.canonical_phase(fallback)
    return None


def create_navigator(
    settings: Settings,
    page_url: Optional[str] = None,
    page_data: Union[str, dict, None] = None,
    progress: Optional[ProgressStore] = None,
    client: Optional[httpx.Client] = None,
) -> PhaseNavigator:
    """
    Build a navigator for the page at `page_url`.

    Args:
        settings: Loaded Settings
        page_url: URL of the hosting page (default: settings.page_url)
        page_data: Embedded page data (JSON string or dict)
        progress: Existing ProgressStore (default: one from settings)
        client: Shared httpx client for content requests

    Returns:
        PhaseNavigator positioned on the resolved phase
    """
    page_url = page_url or settings.page_url
    curriculum = load_curriculum(settings.curriculum_file)
    progress = progress or ProgressStore(
        db_path=settings.progress_db,
        storage_key=settings.storage_key,
        curriculum=curriculum,
    )

    if settings.mode == "gateway":
        context = GatewayContext.from_settings(settings, page_url=page_url, curriculum=curriculum)
        config = NavigatorConfig.gateway(context)
    else:
        config = NavigatorConfig.local(page_url)

    phase = resolve_initial_phase(
        page_data,
        urlsplit(page_url).path,
        curriculum,
        fallback=progress.get_progress().current_phase,
    ) or curriculum.phase_ids[0]

    loader = ContentLoader(
        client=client,
        region_class=settings.content_region_class,
        timeout=settings.request_timeout,
    )
    logger.info(f"Navigator ready: mode={settings.mode}, phase={phase}")
    return PhaseNavigator(curriculum, progress, config, loader, phase)
