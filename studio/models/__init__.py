"""
Pydantic models for AI Builder Studio.

All persisted data shapes defined here. No imports from kernel, repos, or services.
"""

from studio.models.project import CodeSourceInfo, SavedProject, SourceType, VersionEntry

__all__ = [
    "CodeSourceInfo",
    "SavedProject",
    "SourceType",
    "VersionEntry",
]
