"""Repository for saved project operations."""

from __future__ import annotations

import logging

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from studio.errors import StorageFailure
from studio.kernel.store import KeyValueStore, StoreKey
from studio.models.project import SavedProject

logger = logging.getLogger(__name__)

_projects_adapter = TypeAdapter(dict[str, SavedProject])


def _dump(projects: dict[str, SavedProject]) -> str:
    return _projects_adapter.dump_json(projects, by_alias=True).decode("utf-8")


class ProjectRepo:
    """
    All saved-project operations.

    The whole name -> project mapping is read, modified and written back on
    every mutation; the store has no partial-update primitive.
    """

    def __init__(self, store: KeyValueStore):
        self._store = store

    def list_projects(self) -> dict[str, SavedProject]:
        """
        Read every saved project.

        Returns:
            Mapping of name -> SavedProject. Empty if nothing is stored or the
            stored data is malformed; never raises.
        """
        raw = self._store.get(StoreKey.PROJECTS)
        if not raw:
            return {}
        try:
            return _projects_adapter.validate_json(raw)
        except PydanticValidationError:
            logger.warning("Failed to parse saved projects, treating as empty")
            return {}

    def save_project(self, name: str, project: SavedProject) -> None:
        """
        Insert or overwrite a project by name.

        Args:
            name: Project name (unique key, last write wins)
            project: Project to store

        Raises:
            StorageFailure: If the backing store rejects the write
        """
        projects = self.list_projects()
        projects[name] = project
        try:
            self._store.set(StoreKey.PROJECTS, _dump(projects))
        except StorageFailure as e:
            logger.error("Failed to save project %r: %s", name, e.message)
            raise StorageFailure("Could not save the project. Storage might be full.") from e

    def delete_project(self, name: str) -> None:
        """
        Remove a project by name. Deleting an unknown name is not an error.

        Raises:
            StorageFailure: If the backing store rejects the write
        """
        projects = self.list_projects()
        projects.pop(name, None)
        try:
            self._store.set(StoreKey.PROJECTS, _dump(projects))
        except StorageFailure as e:
            logger.error("Failed to delete project %r: %s", name, e.message)
            raise StorageFailure("Could not delete the project.") from e
