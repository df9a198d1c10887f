"""
Gateway context - Where content comes from and how requests authenticate.

Local mode resolves module documents next to the hosting page. Gateway mode
routes every request through the learning platform's API:

    GET {api_base}/{phase folder}/{module file}?token={token}

The API base and token are held on a GatewayContext built once per session
from settings and the page URL; both are resolved lazily and cached.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional
from urllib.parse import parse_qs, quote, unquote, urljoin, urlsplit

from phasenav.errors import APIBaseResolutionFailure
from phasenav.schemas import Curriculum, ModuleDescriptor, PhaseDefinition
from phasenav.utils.assets import add_token

from .catalog import DEFAULT_CURRICULUM, PHASE_ENTRY_DOCUMENT

logger = logging.getLogger(__name__)


def _origin(page_url: str) -> str:
    parts = urlsplit(page_url)
    return f"{parts.scheme}://{parts.netloc}"


# -----------------------------------------------------------------------------
# Local Mode
# -----------------------------------------------------------------------------

def local_content_url(page_url: str, module: ModuleDescriptor) -> str:
    """Module document resolved relative to the hosting page."""
    return urljoin(page_url, module.file)


def local_phase_url(page_url: str, phase: PhaseDefinition) -> str:
    """Entry document of a phase folder at the site root."""
    return f"{_origin(page_url)}/{quote(phase.folder)}/{PHASE_ENTRY_DOCUMENT}"


# -----------------------------------------------------------------------------
# Gateway Mode
# -----------------------------------------------------------------------------

@dataclass
class GatewayContext:
    """
    Per-session gateway state: page URL, API base, project id and token.

    Attributes set explicitly (from configuration) take precedence; missing
    ones are derived from the page URL on first use and cached here.
    """
    page_url: str
    api_base: Optional[str] = None
    project_id: Optional[str] = None
    token: Optional[str] = None
    production_hosts: list[str] = field(default_factory=lambda: ["gnanamai.com", "www.gnanamai.com"])
    production_api_host: str = "api.gnanamai.com"
    local_hosts: list[str] = field(default_factory=lambda: ["localhost", "127.0.0.1"])
    local_backend_port: int = 5000
    path_prefix: str = "/api/realtime-projects/"
    curriculum: Curriculum = field(default_factory=lambda: DEFAULT_CURRICULUM)

    @classmethod
    def from_settings(cls, settings, page_url: Optional[str] = None,
                      curriculum: Optional[Curriculum] = None) -> "GatewayContext":
        return cls(
            page_url=page_url or settings.page_url,
            api_base=settings.api_base,
            project_id=settings.project_id,
            token=settings.token,
            production_hosts=list(settings.production_hosts),
            production_api_host=settings.production_api_host,
            local_hosts=list(settings.local_hosts),
            local_backend_port=settings.local_backend_port,
            path_prefix=settings.gateway_path_prefix,
            curriculum=curriculum or DEFAULT_CURRICULUM,
        )

    @property
    def page_path(self) -> str:
        return urlsplit(self.page_url).path

    def backend_origin(self) -> str:
        """
        Origin of the API server.

        - page already served by the API -> page origin
        - production frontend host -> fixed API host
        - loopback host -> backend port on localhost
        - anything else -> page origin (best effort)
        """
        parts = urlsplit(self.page_url)
        if self.path_prefix in parts.path:
            return _origin(self.page_url)
        host = parts.hostname or ""
        if host in self.production_hosts:
            return f"{parts.scheme}://{self.production_api_host}"
        if host in self.local_hosts:
            return f"{parts.scheme}://localhost:{self.local_backend_port}"
        logger.warning(f"Using page origin as API origin (may be incorrect): {_origin(self.page_url)}")
        return _origin(self.page_url)

    def _is_phase_folder(self, segment: str) -> bool:
        if "_phase" in segment or "Phase" in segment:
            return True
        return self.curriculum.phase_for_folder(segment) is not None

    def _project_id_from_path(self) -> Optional[str]:
        path = self.page_path
        if self.path_prefix not in path:
            return None
        segment = unquote(path.split(self.path_prefix, 1)[1].split("/", 1)[0])
        if not segment:
            return None
        if self._is_phase_folder(segment):
            logger.warning(f"Path segment is a phase folder, not a project id: {segment}")
            return None
        return segment

    def resolve_api_base(self) -> str:
        """
        Return the API base, deriving and caching it on first use.

        Raises:
            APIBaseResolutionFailure: If neither configuration nor the page URL
                identifies the project
        """
        if self.api_base:
            return self.api_base.rstrip("/")

        project_id = self.project_id or self._project_id_from_path()
        if not project_id:
            raise APIBaseResolutionFailure(
                f"Unable to determine API base URL for content loading (page: {self.page_url})"
            )

        self.project_id = project_id
        self.api_base = f"{self.backend_origin()}{self.path_prefix}{quote(project_id)}"
        logger.info(f"Resolved API base: {self.api_base}")
        return self.api_base

    def resolve_token(self) -> str:
        """Return the access token, reading it from the page URL if unset."""
        if self.token:
            return self.token
        values = parse_qs(urlsplit(self.page_url).query).get("token")
        if values and values[0]:
            self.token = values[0]
            return self.token
        logger.warning("No token available for gateway requests")
        return ""

    def content_url(self, phase: PhaseDefinition, module: ModuleDescriptor) -> str:
        url = f"{self.resolve_api_base()}/{quote(phase.folder, safe='')}/{module.file}"
        return add_token(url, self.resolve_token())

    def phase_url(self, phase: PhaseDefinition) -> str:
        url = f"{self.resolve_api_base()}/{quote(phase.folder, safe='')}/{PHASE_ENTRY_DOCUMENT}"
        return add_token(url, self.resolve_token())
