"""Data models for carton projects."""

from .manifest import ProjectManifest, Requirement

__all__ = [
    'ProjectManifest',
    'Requirement',
]
