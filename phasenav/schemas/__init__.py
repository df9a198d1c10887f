"""
PhaseNav Schemas - Pydantic models for progress and curriculum data.

This module exports all schema classes for:
- Curriculum: phases, modules and their fixed order
- Progress: persisted unlock/completion state
"""

# Curriculum schemas
from .curriculum import (
    ModuleDescriptor,
    PhaseDefinition,
    Curriculum,
)

# Progress schemas
from .progress import (
    INITIAL_PHASE,
    INITIAL_MODULE,
    PHASE_IDS,
    ProgressState,
    UnlockResult,
    add_unique,
)

__all__ = [
    # Curriculum
    'ModuleDescriptor',
    'PhaseDefinition',
    'Curriculum',
    # Progress
    'INITIAL_PHASE',
    'INITIAL_MODULE',
    'PHASE_IDS',
    'ProgressState',
    'UnlockResult',
    'add_unique',
]
