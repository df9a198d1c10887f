"""
PhaseNavigator - Module sequencing, lock checks and content loading.

Provides:
- Tab switching guarded by unlock state
- "Next" progression that completes the current module
- Cross-phase navigation to a phase's entry document
- Cache-first content loading
- Sidebar, progress list and phase bar view models
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from phasenav.errors import APIBaseResolutionFailure, ContentFetchFailure, LockViolation
from phasenav.schemas import Curriculum, ModuleDescriptor, PhaseDefinition, UnlockResult
from phasenav.utils.assets import rewrite_asset_urls

from .gateway import GatewayContext, local_content_url, local_phase_url
from .loader import ContentCache, ContentLoader
from .progress import ProgressStore

logger = logging.getLogger(__name__)

MODULE_LOCKED_NOTICE = "This module is locked. Please complete the previous modules to unlock it."
NEXT_LOCKED_NOTICE = "The next module is locked. Please complete all content in the current module first."
PHASE_LOCKED_NOTICE = "This phase is locked. Please complete the previous phases to unlock it."
LOCKED_DESCRIPTION = "Complete previous modules to unlock"
LOCKED_ICON = "🔒"
COMPLETED_ICON = "✅"

ContentResolver = Callable[[PhaseDefinition, ModuleDescriptor], str]
PhaseUrlResolver = Callable[[PhaseDefinition], str]
AssetRewriter = Callable[[str], str]


@dataclass(frozen=True)
class NavigatorConfig:
    """
    Deployment variant of the navigator.

    Attributes:
        enforce_locks: Apply unlock checks (False: everything is open)
        content_resolver: URL of a module's source document
        phase_url_resolver: URL of a phase's entry document
        asset_rewriter: Optional transform applied to every fetched fragment
    """
    enforce_locks: bool
    content_resolver: ContentResolver
    phase_url_resolver: PhaseUrlResolver
    asset_rewriter: Optional[AssetRewriter] = None

    @classmethod
    def local(cls, page_url: str) -> "NavigatorConfig":
        """Self-hosted: locks enforced, documents next to the page, no token."""
        return cls(
            enforce_locks=True,
            content_resolver=lambda phase, module: local_content_url(page_url, module),
            phase_url_resolver=lambda phase: local_phase_url(page_url, phase),
        )

    @classmethod
    def gateway(cls, context: GatewayContext) -> "NavigatorConfig":
        """Gateway-proxied: no locks, API URLs with token, asset rewriting."""
        def rewrite(fragment: str) -> str:
            return rewrite_asset_urls(
                fragment,
                context.resolve_api_base(),
                context.resolve_token(),
                context.page_path,
            )

        return cls(
            enforce_locks=False,
            content_resolver=context.content_url,
            phase_url_resolver=context.phase_url,
            asset_rewriter=rewrite,
        )


@dataclass
class RenderedContent:
    """Markup for the content pane, or the failure that replaced it."""
    module_id: str
    html: str = ""
    from_cache: bool = False
    error: Optional[str] = None
    source_file: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class NavigationOutcome:
    """Result of a tab switch or "next" click."""
    allowed: bool
    module_id: str
    notice: Optional[str] = None
    content: Optional[RenderedContent] = None
    unlock: Optional[UnlockResult] = None


@dataclass
class PhaseNavigationOutcome:
    """Result of a phase bar click; `url` is a full navigation target."""
    allowed: bool
    phase: str
    url: Optional[str] = None
    replace: bool = True
    notice: Optional[str] = None


@dataclass
class SidebarItem:
    """Module entry in the sidebar."""
    module: ModuleDescriptor
    active: bool
    unlocked: bool
    completed: bool

    @property
    def icon(self) -> str:
        if not self.unlocked:
            return LOCKED_ICON
        return COMPLETED_ICON if self.completed else self.module.icon

    @property
    def description(self) -> str:
        return self.module.description if self.unlocked else LOCKED_DESCRIPTION


@dataclass
class ProgressItem:
    """Dot in the progress list."""
    label: str
    active: bool


@dataclass
class PhaseBarItem:
    """Phase button in the top navigation bar."""
    phase: PhaseDefinition
    display_id: str
    unlocked: bool
    current: bool


class PhaseNavigator:
    """
    Navigate the modules of one phase with lock checking.

    Combines the curriculum (fixed order), ProgressStore (user state) and
    ContentLoader (documents). The navigator only queries the store and asks
    it to complete modules; it never edits progress directly.
    """

    def __init__(
        self,
        curriculum: Curriculum,
        progress: ProgressStore,
        config: NavigatorConfig,
        loader: ContentLoader,
        phase: str,
    ):
        """
        Initialize navigator.

        Args:
            curriculum: Phase and module catalog
            progress: ProgressStore for unlock state
            config: Deployment variant (local or gateway)
            loader: ContentLoader for module documents
            phase: Phase id or alias to navigate

        Raises:
            ValueError: If the phase is not in the curriculum
        """
        definition = curriculum.phase(phase)
        if definition is None:
            raise ValueError(f"Unknown phase: {phase}")

        self.curriculum = curriculum
        self.progress = progress
        self.config = config
        self.loader = loader
        self.phase = definition
        self.current_module = definition.first_module.id
        self.cache = ContentCache()

    @property
    def current_phase(self) -> str:
        return self.phase.id

    @property
    def modules(self) -> list[ModuleDescriptor]:
        return self.phase.modules

    # -------------------------------------------------------------------------
    # Lock Checks
    # -------------------------------------------------------------------------

    def is_module_unlocked(self, module_id: str) -> bool:
        if not self.config.enforce_locks:
            return True
        return self.progress.is_module_unlocked(self.current_phase, module_id)

    def is_module_completed(self, module_id: str) -> bool:
        return self.progress.is_module_completed(self.current_phase, module_id)

    def is_phase_unlocked(self, phase_id: str) -> bool:
        if not self.config.enforce_locks:
            return True
        return self.progress.is_phase_accessible(phase_id)

    def _require_module_unlocked(self, module_id: str, notice: str = MODULE_LOCKED_NOTICE):
        if not self.is_module_unlocked(module_id):
            raise LockViolation(notice, self.current_phase, module_id)

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def load_initial_content(self) -> NavigationOutcome:
        """Select the first module of the phase."""
        return self.switch_tab(self.phase.first_module.id)

    def switch_tab(self, module_id: str) -> NavigationOutcome:
        """
        Make `module_id` the current module and load its content.

        A locked (or unknown) module is rejected with a notice and nothing
        changes.
        """
        if self.phase.get_module(module_id) is None:
            return NavigationOutcome(False, self.current_module, notice=f"Unknown module: {module_id}")

        try:
            self._require_module_unlocked(module_id)
        except LockViolation as e:
            logger.debug(f"Rejected switch to {e.phase}/{e.module}")
            return NavigationOutcome(False, self.current_module, notice=str(e))

        self.current_module = module_id
        content = self.load_content(module_id)
        return NavigationOutcome(True, module_id, content=content)

    def go_to_next(self) -> NavigationOutcome:
        """
        Complete the current module and move to the following one.

        No-op on the last module of the phase.
        """
        following = self.phase.next_module(self.current_module)
        if following is None:
            return NavigationOutcome(False, self.current_module)

        unlock = self.progress.complete_module(self.current_phase, self.current_module)

        try:
            self._require_module_unlocked(following.id, NEXT_LOCKED_NOTICE)
        except LockViolation as e:
            logger.debug(f"Next module {e.module} still locked after completion")
            return NavigationOutcome(False, self.current_module, notice=str(e), unlock=unlock)

        outcome = self.switch_tab(following.id)
        outcome.unlock = unlock
        return outcome

    def complete_current(self) -> NavigationOutcome:
        """
        Complete the current module without moving.

        The only way to finish a terminal module, since it has no next
        control; completing it unlocks the following phase.
        """
        unlock = self.progress.complete_module(self.current_phase, self.current_module)
        return NavigationOutcome(unlock.completed, self.current_module, unlock=unlock)

    def navigate_to_phase(self, phase_id: str) -> PhaseNavigationOutcome:
        """
        Resolve the entry document of another phase.

        The caller performs a full navigation to `url`, replacing the current
        history entry.
        """
        definition = self.curriculum.phase(phase_id)
        if definition is None:
            return PhaseNavigationOutcome(False, phase_id, notice=f"Unknown phase: {phase_id}")

        if not self.is_phase_unlocked(phase_id):
            logger.debug(f"Rejected navigation to locked phase {phase_id}")
            return PhaseNavigationOutcome(False, definition.id, notice=PHASE_LOCKED_NOTICE)

        try:
            url = self.config.phase_url_resolver(definition)
        except APIBaseResolutionFailure as e:
            logger.error(f"Cannot navigate to phase {definition.id}: {e}")
            return PhaseNavigationOutcome(False, definition.id, notice=str(e))

        return PhaseNavigationOutcome(True, definition.id, url=url, replace=True)

    @property
    def show_next(self) -> bool:
        """Whether the forward control is visible for the current module."""
        descriptor = self.phase.get_module(self.current_module)
        if descriptor is None or descriptor.is_terminal:
            return False
        return self.phase.next_module(self.current_module) is not None

    # -------------------------------------------------------------------------
    # Content
    # -------------------------------------------------------------------------

    def load_content(self, module_id: str) -> RenderedContent:
        """
        Return the content of a module, fetching it on a cache miss.

        Failures never raise: they come back as RenderedContent with `error`
        set and are not cached, so the next attempt fetches again.
        """
        cached = self.cache.get(module_id)
        if cached is not None:
            return RenderedContent(module_id, cached, from_cache=True)

        descriptor = self.phase.get_module(module_id)
        if descriptor is None:
            return RenderedContent(module_id, error="Content not found")

        try:
            url = self.config.content_resolver(self.phase, descriptor)
            fragment = self.loader.load_fragment(url, descriptor.file)
            if self.config.asset_rewriter is not None:
                fragment = self.config.asset_rewriter(fragment)
        except ContentFetchFailure as e:
            logger.warning(f"Error loading content: {e}")
            return RenderedContent(module_id, error=e.message, source_file=descriptor.file)
        except APIBaseResolutionFailure as e:
            logger.error(f"Error loading content: {e}")
            return RenderedContent(module_id, error=str(e), source_file=descriptor.file)

        self.cache.put(module_id, fragment)
        return RenderedContent(module_id, fragment)

    # -------------------------------------------------------------------------
    # View Models
    # -------------------------------------------------------------------------

    def sidebar_items(self) -> list[SidebarItem]:
        return [
            SidebarItem(
                module=module,
                active=module.id == self.current_module,
                unlocked=self.is_module_unlocked(module.id),
                completed=self.is_module_completed(module.id),
            )
            for module in self.modules
        ]

    def progress_items(self) -> list[ProgressItem]:
        return [
            ProgressItem(label=module.label, active=module.id == self.current_module)
            for module in self.modules
        ]

    def phase_bar(self) -> list[PhaseBarItem]:
        """Phases in order; development is keyed by its display alias."""
        items = []
        for phase in self.curriculum.phases:
            display_id = phase.aliases[0] if phase.aliases else phase.id
            items.append(PhaseBarItem(
                phase=phase,
                display_id=display_id,
                unlocked=self.is_phase_unlocked(display_id),
                current=phase.id == self.current_phase,
            ))
        return items

    def get_position(self) -> tuple[int, int]:
        """Current module position as (current, total)."""
        ids = self.phase.module_ids
        return (ids.index(self.current_module) + 1, len(ids))
