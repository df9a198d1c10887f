"""
PhaseNav Classroom - Runtime components for gated project navigation.

This module provides:
- ProgressStore: Durable unlock/completion state
- GatewayContext: API base and token resolution for proxied content
- ContentLoader: Fetch module documents and extract their content
- PhaseNavigator: Module sequencing with lock checks
"""

from .catalog import (
    DEFAULT_CURRICULUM,
    FOLDER_PHASE_NAMES,
    PHASE_ENTRY_DOCUMENT,
    load_curriculum,
)

from .progress import (
    ProgressStore,
    DEFAULT_PROGRESS_DIR,
    DEFAULT_PROGRESS_DB,
    DEFAULT_STORAGE_KEY,
)

from .gateway import (
    GatewayContext,
    local_content_url,
    local_phase_url,
)

from .loader import (
    ContentCache,
    ContentLoader,
)

from .navigator import (
    PhaseNavigator,
    NavigatorConfig,
    NavigationOutcome,
    PhaseNavigationOutcome,
    RenderedContent,
    SidebarItem,
    ProgressItem,
    PhaseBarItem,
)

from .session import (
    create_navigator,
    resolve_initial_phase,
)

__all__ = [
    # Catalog
    "DEFAULT_CURRICULUM",
    "FOLDER_PHASE_NAMES",
    "PHASE_ENTRY_DOCUMENT",
    "load_curriculum",
    # Progress
    "ProgressStore",
    "DEFAULT_PROGRESS_DIR",
    "DEFAULT_PROGRESS_DB",
    "DEFAULT_STORAGE_KEY",
    # Gateway
    "GatewayContext",
    "local_content_url",
    "local_phase_url",
    # Loader
    "ContentCache",
    "ContentLoader",
    # Navigator
    "PhaseNavigator",
    "NavigatorConfig",
    "NavigationOutcome",
    "PhaseNavigationOutcome",
    "RenderedContent",
    "SidebarItem",
    "ProgressItem",
    "PhaseBarItem",
    # Session
    "create_navigator",
    "resolve_initial_phase",
]
