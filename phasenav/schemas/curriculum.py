"""
Curriculum schemas - Phases and their ordered modules.

A curriculum is static configuration: an ordered list of phases, each with
an ordered list of modules. The last module of every phase carries
`is_terminal=True`; completing it rolls progress over into the next phase.
"""

from typing import Optional

from pydantic import BaseModel, Field, model_validator


class ModuleDescriptor(BaseModel):
    """One content unit within a phase, shown as a single tab."""

    id: str
    file: str = Field(description="Source document, e.g. 'Overview_Content.html'")
    label: str
    icon: str = ""
    description: str = ""
    is_terminal: bool = False


class PhaseDefinition(BaseModel):
    """A top-level stage of the project."""

    id: str
    label: str
    folder: str = Field(description="Folder holding the phase documents, may contain spaces")
    aliases: list[str] = Field(default_factory=list)
    modules: list[ModuleDescriptor]

    @model_validator(mode="after")
    def _check_modules(self) -> "PhaseDefinition":
        if not self.modules:
            raise ValueError(f"Phase '{self.id}' has no modules")
        ids = [m.id for m in self.modules]
        if len(ids) != len(set(ids)):
            raise ValueError(f"Phase '{self.id}' has duplicate module ids")
        terminals = [m.id for m in self.modules if m.is_terminal]
        if terminals != [ids[-1]]:
            raise ValueError(
                f"Phase '{self.id}' must mark exactly its last module as terminal, got {terminals}"
            )
        return self

    @property
    def module_ids(self) -> list[str]:
        return [m.id for m in self.modules]

    @property
    def first_module(self) -> ModuleDescriptor:
        return self.modules[0]

    @property
    def terminal_module(self) -> ModuleDescriptor:
        return self.modules[-1]

    def get_module(self, module_id: str) -> Optional[ModuleDescriptor]:
        for module in self.modules:
            if module.id == module_id:
                return module
        return None

    def next_module(self, module_id: str) -> Optional[ModuleDescriptor]:
        """Module after `module_id` in fixed order, or None at the end."""
        ids = self.module_ids
        if module_id not in ids:
            return None
        idx = ids.index(module_id)
        if idx + 1 >= len(ids):
            return None
        return self.modules[idx + 1]

    @property
    def all_ids(self) -> list[str]:
        """Canonical id followed by its aliases."""
        return [self.id, *self.aliases]


class Curriculum(BaseModel):
    """Ordered phases of one project."""

    project_id: str
    title: str
    phases: list[PhaseDefinition]

    @model_validator(mode="after")
    def _check_phases(self) -> "Curriculum":
        seen: set[str] = set()
        for phase in self.phases:
            for name in phase.all_ids:
                if name in seen:
                    raise ValueError(f"Duplicate phase identifier: {name}")
                seen.add(name)
        return self

    @property
    def phase_ids(self) -> list[str]:
        return [p.id for p in self.phases]

    def canonical_phase(self, phase_id: str) -> Optional[str]:
        """Map an alias (e.g. 'code-development') to its canonical phase id."""
        for phase in self.phases:
            if phase_id in phase.all_ids:
                return phase.id
        return None

    def phase(self, phase_id: str) -> Optional[PhaseDefinition]:
        canonical = self.canonical_phase(phase_id)
        if canonical is None:
            return None
        for phase in self.phases:
            if phase.id == canonical:
                return phase
        return None

    def next_phase(self, phase_id: str) -> Optional[PhaseDefinition]:
        """Phase after `phase_id`, or None for the last phase."""
        canonical = self.canonical_phase(phase_id)
        ids = self.phase_ids
        if canonical is None:
            return None
        idx = ids.index(canonical)
        if idx + 1 >= len(ids):
            return None
        return self.phases[idx + 1]

    def module_order(self, phase_id: str) -> list[str]:
        phase = self.phase(phase_id)
        return phase.module_ids if phase else []

    def phase_for_folder(self, folder: str) -> Optional[PhaseDefinition]:
        """Find a phase by folder name, tolerating '_' for spaces."""
        wanted = folder.replace(" ", "_").lower()
        for phase in self.phases:
            if phase.folder.replace(" ", "_").lower() == wanted:
                return phase
        return None
