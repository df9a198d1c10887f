"""
Error taxonomy for PhaseNav.

Lock violations and content failures are expected outcomes of user
interaction: the navigator catches them at its boundary and turns them into
notices or inline error cards. Only the file-host errors propagate to the
caller.
"""


class PhaseNavError(Exception):
    """Base class for all PhaseNav errors."""


class LockViolation(PhaseNavError):
    """Navigation to a module or phase that is not unlocked yet."""

    def __init__(self, message: str, phase: str, module: str | None = None):
        super().__init__(message)
        self.phase = phase
        self.module = module


class ContentFetchFailure(PhaseNavError):
    """A module document could not be fetched or had no usable content."""

    def __init__(self, source_file: str, message: str):
        super().__init__(f"{source_file}: {message}")
        self.source_file = source_file
        self.message = message


class PersistedStateCorruption(PhaseNavError):
    """The stored progress record could not be parsed."""


class APIBaseResolutionFailure(PhaseNavError):
    """No API base could be determined for gateway-proxied content."""


class ResourceFetchError(PhaseNavError):
    """An externally hosted resource could not be retrieved."""


class UpstreamAccessDenied(ResourceFetchError):
    """The file host requires sign-in or a sharing change."""
