"""
Progress tracking schemas for PhaseNav.

Defines Pydantic models for learner progress including:
- The persisted unlock/completion record
- The result of completing a module
"""

from pydantic import BaseModel, ConfigDict, Field


INITIAL_PHASE = "brd"
INITIAL_MODULE = "overview"
PHASE_IDS = ["brd", "uiux", "architectural", "development", "testing", "deployment"]


def _empty_phase_map() -> dict[str, list[str]]:
    return {phase: [] for phase in PHASE_IDS}


class ProgressState(BaseModel):
    """
    Persisted unlock/completion record for one project.

    Serialized with camelCase keys so stored records keep the
    `currentPhase` / `unlockedPhases` layout. Lists are treated as sets:
    every insert goes through `add_unique`.
    """

    model_config = ConfigDict(populate_by_name=True)

    current_phase: str = Field(default=INITIAL_PHASE, alias="currentPhase")
    unlocked_phases: list[str] = Field(
        default_factory=lambda: [INITIAL_PHASE], alias="unlockedPhases"
    )
    unlocked_modules: dict[str, list[str]] = Field(
        default_factory=lambda: {**_empty_phase_map(), INITIAL_PHASE: [INITIAL_MODULE]},
        alias="unlockedModules",
    )
    completed_modules: dict[str, list[str]] = Field(
        default_factory=_empty_phase_map, alias="completedModules"
    )

    @classmethod
    def initial(cls) -> "ProgressState":
        """Fresh state: only the first phase and its overview unlocked."""
        return cls()

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


class UnlockResult(BaseModel):
    """What a single `complete_module` call changed."""

    phase: str
    module: str
    completed: bool = False
    unlocked_module: str | None = None
    unlocked_phases: list[str] = Field(default_factory=list)
    next_phase_module: str | None = None


def add_unique(items: list[str], value: str) -> bool:
    """Append value unless present. Returns True if it was added."""
    if value in items:
        return False
    items.append(value)
    return True
