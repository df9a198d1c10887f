"""
PhaseNav - Progress-gated navigation for realtime learning projects.

Packages:
- schemas: Pydantic models for progress state and the curriculum catalog
- classroom: Progress storage, content loading and the phase navigator
- viewer: HTML renderers for the sidebar, progress list and error cards
- resources: Retrieval of externally hosted files (Google Drive)
- utils: HTML fragment helpers, asset rewriting and YAML loading
"""

__version__ = "0.3.0"
