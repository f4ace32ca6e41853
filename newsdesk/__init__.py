"""Editorial backend: permission resolution and content publication workflow."""

__version__ = "1.0.0"
