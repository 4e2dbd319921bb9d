"""Configuration for Neuro Scholar."""

from neuro_scholar.config.settings import PROJECT_ROOT, Settings, settings

__all__ = ["PROJECT_ROOT", "Settings", "settings"]
