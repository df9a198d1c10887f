"""PhaseNav viewer - HTML renderers for navigation view models."""
