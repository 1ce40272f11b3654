"""
Repository layer for AI Builder Studio.

All reads and writes of saved projects live here.
"""

from studio.repos.project_repo import ProjectRepo

__all__ = [
    "ProjectRepo",
]
