"""
AI Builder Studio Kernel — Application State Controller

Coordinates prompt entry, generation, refinement, import, save/load,
restore-from-history and comparison, and persists the relevant state on
every change. This is where the version/state reconciliation happens; the
ledger, store and services it drives are plain collaborators.

Ordering inside one operation is fixed: snapshot → set loading → await →
mutate on success or roll back on failure → clear loading.

Every generate/refine/clone is tagged with a monotonically increasing
request id. A response is applied only if its id is still the latest one
issued; clear-all and every other document-replacing operation issue a new
id, so a late response can never clobber newer state.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from studio.config import settings
from studio.errors import GenerationFailure, ImportFailure, StorageFailure, ValidationError
from studio.kernel.debounce import Debouncer
from studio.kernel.diff import Comparison
from studio.kernel.html_import import IMPORTED_PROMPT, normalize_imported_html
from studio.kernel.ledger import VersionLedger
from studio.kernel.state import (
    IDLE,
    ActiveTab,
    ConfirmClear,
    ConfirmRestore,
    Generating,
    Idle,
    LoadingState,
    PendingConfirmation,
    Refining,
    Theme,
    clamp_panel_width,
)
from studio.kernel.store import KeyValueStore, StoreKey, remove_quietly, set_quietly
from studio.models.project import CodeSourceInfo, SavedProject, VersionEntry
from studio.repos.project_repo import ProjectRepo
from studio.services.generation import GenerationClient
from studio.services.github_import import GitHubImporter, parse_repo_url
from studio.services.prompt_builder import language_context

logger = logging.getLogger(__name__)

EXPORT_FILE_NAME = "ai-generated-app.html"

MSG_EMPTY_PROMPT = "Please enter a description for your application."
MSG_EMPTY_REFINEMENT = "Please enter a refinement request."
MSG_NOTHING_TO_REFINE = "There is no application to refine yet. Generate or import one first."
MSG_EMPTY_PROJECT_NAME = "Please enter a project name."
MSG_EMPTY_REPO_URL = "Please enter a repository URL."
MSG_NOTHING_TO_EXPORT = "There is no application to export."


def _require(value: str, message: str) -> str:
    """Return value stripped. Raises ValidationError(message) if it is blank."""
    if not value or not value.strip():
        raise ValidationError(message)
    return value.strip()


class StudioController:
    """Central state for one editing session."""

    def __init__(
        self,
        store: KeyValueStore,
        generation: GenerationClient,
        importer: GitHubImporter | None = None,
        *,
        ledger: VersionLedger | None = None,
        project_repo: ProjectRepo | None = None,
        autosave_delay: float | None = None,
        default_theme: Theme | None = None,
    ):
        self._store = store
        self._generation = generation
        self._importer = importer
        self._owns_importer = False
        self.ledger = ledger or VersionLedger(store, capacity=settings.HISTORY_LIMIT)
        self._project_repo = project_repo or ProjectRepo(store)
        self._autosave = Debouncer(settings.AUTOSAVE_DELAY_SECONDS if autosave_delay is None else autosave_delay)
        self._default_theme: Theme = default_theme or settings.DEFAULT_THEME  # type: ignore[assignment]
        self._request_seq = 0

        self.prompt = ""
        self.refinement_prompt = ""
        self.initial_prompt: str | None = None
        self.code = ""
        self.previous_code: str | None = None
        self.source: CodeSourceInfo | None = None
        self.loading: LoadingState = IDLE
        self.error: str | None = None
        self.active_tab: ActiveTab = "preview"
        self.theme: Theme = self._default_theme
        self.panel_width: float = settings.DEFAULT_PANEL_WIDTH
        self.comparison: Comparison | None = None
        self.pending_confirmation: PendingConfirmation | None = None
        self.projects: dict[str, SavedProject] = {}

        self._hydrate()

    # -- session restore --

    def _hydrate(self) -> None:
        """Restore persisted session state. Malformed values fall back to defaults."""
        code = self._store.get(StoreKey.CODE)
        initial_prompt = self._store.get(StoreKey.INITIAL_PROMPT)
        previous_code = self._store.get(StoreKey.PREVIOUS_CODE)
        source_raw = self._store.get(StoreKey.SOURCE_INFO)

        if code:
            self.code = code
        if initial_prompt:
            self.initial_prompt = initial_prompt
            if not code:
                self.prompt = initial_prompt
        if previous_code:
            self.previous_code = previous_code
        if source_raw:
            try:
                self.source = CodeSourceInfo.model_validate_json(source_raw)
            except PydanticValidationError:
                logger.warning("Failed to parse source info from storage, discarding it")
                remove_quietly(self._store, StoreKey.SOURCE_INFO)

        theme = self._store.get(StoreKey.THEME)
        if theme in ("light", "dark"):
            self.theme = theme  # type: ignore[assignment]

        width = self._store.get(StoreKey.PANEL_WIDTH)
        if width:
            try:
                self.panel_width = clamp_panel_width(float(width))
            except ValueError:
                logger.warning("Ignoring malformed panel width %r", width)

        self.projects = self._project_repo.list_projects()

    # -- derived state --

    @property
    def history(self) -> list[VersionEntry]:
        return self.ledger.get_history()

    @property
    def is_busy(self) -> bool:
        return not isinstance(self.loading, Idle)

    # -- persistence helpers --

    def _persist_optional(self, key: str, value: str | None) -> None:
        if value:
            set_quietly(self._store, key, value)
        else:
            remove_quietly(self._store, key)

    def _persist_code(self) -> None:
        self._persist_optional(StoreKey.CODE, self.code)

    def _set_previous_code(self, code: str | None) -> None:
        self.previous_code = code or None
        self._persist_optional(StoreKey.PREVIOUS_CODE, self.previous_code)

    def _set_initial_prompt(self, prompt: str | None) -> None:
        self.initial_prompt = prompt
        self._persist_optional(StoreKey.INITIAL_PROMPT, prompt)

    def _set_source(self, source: CodeSourceInfo | None) -> None:
        self.source = source
        self._persist_optional(StoreKey.SOURCE_INFO, source.model_dump_json() if source else None)

    def _replace_code(self, code: str) -> None:
        """Coarse replacement: persist now, drop any pending autosave and stale comparison."""
        self._autosave.cancel()
        self.code = code
        self.comparison = None
        self._persist_code()

    def _reject(self, error: ValidationError) -> bool:
        self.error = error.message
        return False

    # -- request bookkeeping --

    def _next_request_id(self) -> int:
        self._request_seq += 1
        return self._request_seq

    def _is_current(self, request_id: int) -> bool:
        return request_id == self._request_seq

    def _finish(self, request_id: int) -> None:
        """Return to idle if the loading state still belongs to this request."""
        if getattr(self.loading, "request_id", None) == request_id:
            self.loading = IDLE

    def _supersede_inflight(self) -> None:
        """Invalidate any outstanding generate/refine/clone."""
        if self.is_busy:
            logger.info("Superseding in-flight %s request", self.loading.kind)
        self._next_request_id()
        self.loading = IDLE

    # -- generate --

    async def generate(self, prompt: str | None = None) -> bool:
        """
        Generate a new application from the prompt.

        On failure everything the call touched is rolled back: code, source
        descriptor and ledger stay as they were, the previous-code slot is
        cleared and the error message is set.

        Returns:
            True if the generated code was applied
        """
        if prompt is not None:
            self.prompt = prompt
        prompt = self.prompt
        try:
            _require(prompt, MSG_EMPTY_PROMPT)
        except ValidationError as e:
            return self._reject(e)
        if self.is_busy:
            logger.warning("Ignoring generate while %s is in flight", self.loading.kind)
            return False

        request_id = self._next_request_id()
        prior_initial_prompt = self.initial_prompt
        self._set_previous_code(self.code)
        self.loading = Generating(prompt=prompt, request_id=request_id)
        self.error = None
        self._set_initial_prompt(prompt)
        logger.info("Generating app (request %d)", request_id)

        try:
            code = await self._generation.generate(prompt)
        except GenerationFailure as e:
            if not self._is_current(request_id):
                logger.warning("Dropping stale generation failure (request %d)", request_id)
                self._finish(request_id)
                return False
            self._set_initial_prompt(prior_initial_prompt)
            self._set_previous_code(None)
            self.error = f"Generation failed: {e.message}"
            self.loading = IDLE
            return False

        if not self._is_current(request_id):
            logger.warning("Dropping stale generation response (request %d)", request_id)
            self._finish(request_id)
            return False

        self._replace_code(code)
        self._set_source(CodeSourceInfo(type="prompt", name=prompt))
        self.ledger.add_to_history(code)
        self.loading = IDLE
        return True

    # -- refine --

    async def refine(self, request: str | None = None) -> bool:
        """
        Ask the model to modify the current application.

        On failure the code is left untouched (refine never partially
        applies) and only the comparison baseline is cleared.

        Returns:
            True if the refined code was applied
        """
        if request is not None:
            self.refinement_prompt = request
        request = self.refinement_prompt
        try:
            _require(request, MSG_EMPTY_REFINEMENT)
            _require(self.code, MSG_NOTHING_TO_REFINE)
        except ValidationError as e:
            return self._reject(e)
        if self.is_busy:
            logger.warning("Ignoring refine while %s is in flight", self.loading.kind)
            return False

        request_id = self._next_request_id()
        current_code = self.code
        self._set_previous_code(current_code)
        self.loading = Refining(request=request, request_id=request_id)
        self.error = None
        logger.info("Refining app (request %d)", request_id)

        try:
            code = await self._generation.refine(self.initial_prompt or "", current_code, request)
        except GenerationFailure as e:
            if not self._is_current(request_id):
                logger.warning("Dropping stale refinement failure (request %d)", request_id)
                self._finish(request_id)
                return False
            self._set_previous_code(None)
            self.error = f"Refinement failed: {e.message}"
            self.loading = IDLE
            return False

        if not self._is_current(request_id):
            logger.warning("Dropping stale refinement response (request %d)", request_id)
            self._finish(request_id)
            return False

        self._replace_code(code)
        self.ledger.add_to_history(code)
        self.refinement_prompt = ""
        self.loading = IDLE
        return True

    # -- completion --

    async def suggest_completion(self, text_before: str, text_after: str) -> str:
        """Inline completion at the cursor. Never raises; "" when nothing useful came back."""
        return await self._generation.complete_at(language_context(text_before), text_before, text_after)

    # -- import --

    def _apply_import(self, content: str, source: CodeSourceInfo) -> None:
        self._supersede_inflight()
        code = normalize_imported_html(content)
        self.prompt = ""
        self.refinement_prompt = ""
        self.error = None
        self.active_tab = "preview"
        self._set_previous_code(None)
        self._replace_code(code)
        self._set_initial_prompt(IMPORTED_PROMPT)
        self._set_source(source)
        self.ledger.add_to_history(code)
        logger.info("Imported code from %s %r", source.type, source.name)

    def import_file(self, content: str, file_name: str) -> None:
        """Replace the document with an imported local file."""
        self._apply_import(content, CodeSourceInfo(type="file", name=file_name))

    async def clone_repository(self, repo_url: str) -> bool:
        """
        Import the root index.html of a public repository.

        Import failures land in the error field; the caller (clone dialog)
        stays open and shows it.

        Returns:
            True if the repository's index.html was imported
        """
        try:
            _require(repo_url, MSG_EMPTY_REPO_URL)
        except ValidationError as e:
            return self._reject(e)
        if self._importer is None:
            self._importer = GitHubImporter()
            self._owns_importer = True

        ticket = self._request_seq
        try:
            content = await self._importer.fetch_root_index_file(repo_url)
        except ImportFailure as e:
            logger.error("Repository import failed for %s: %s", repo_url, e.message)
            if self._request_seq == ticket:
                self.error = e.message
            return False

        if self._request_seq != ticket:
            logger.warning("Dropping stale repository import of %s", repo_url)
            return False

        identifier = parse_repo_url(repo_url, self._importer.host).identifier
        self._apply_import(content, CodeSourceInfo(type="github", name=identifier))
        return True

    # -- manual edit --

    def edit_code(self, code: str) -> None:
        """Keystroke-level edit: replace code, debounce persistence, no ledger entry."""
        self.code = code
        self._autosave.schedule(self._persist_code)

    def flush_autosave(self) -> None:
        self._autosave.flush()

    # -- history --

    def request_restore(self, entry: VersionEntry) -> None:
        self.pending_confirmation = ConfirmRestore(entry=entry)

    def cancel_restore(self) -> None:
        if isinstance(self.pending_confirmation, ConfirmRestore):
            self.pending_confirmation = None

    def confirm_restore(self) -> bool:
        """
        Restore the pending ledger entry as a new head (not a rewind).

        The restored-over code goes to the previous-code slot so it can
        still be compared once.
        """
        pending = self.pending_confirmation
        if not isinstance(pending, ConfirmRestore):
            return False
        self.pending_confirmation = None
        self._supersede_inflight()
        self._set_previous_code(self.code)
        self._replace_code(pending.entry.code)
        self.ledger.add_to_history(pending.entry.code)
        self.error = None
        logger.info("Restored version from %s", pending.entry.created_at.isoformat())
        return True

    # -- compare --

    def compare_with_previous(self) -> Comparison | None:
        """Open a comparison of the previous-code slot against current code."""
        if self.previous_code is None:
            return None
        self.comparison = Comparison(original=self.previous_code, modified=self.code)
        return self.comparison

    def compare_with_version(self, entry: VersionEntry) -> Comparison:
        """Open a comparison of a ledger entry against current code."""
        self.comparison = Comparison(
            original=entry.code,
            modified=self.code,
            original_label=f"version {entry.created_at.isoformat()}",
        )
        return self.comparison

    def close_comparison(self) -> None:
        self.comparison = None

    # -- projects --

    def refresh_projects(self) -> dict[str, SavedProject]:
        self.projects = self._project_repo.list_projects()
        return self.projects

    def is_overwriting(self, name: str) -> bool:
        return name.strip() in self.projects

    def save_project(self, name: str) -> bool:
        """
        Save the current document under name.

        Returns:
            False if the name is blank (the error field says so), else True

        Raises:
            StorageFailure: If the write is rejected. The project list is left
                as it was and the error field is set
        """
        try:
            name = _require(name, MSG_EMPTY_PROJECT_NAME)
        except ValidationError as e:
            return self._reject(e)
        project = SavedProject(
            generated_code=self.code,
            initial_prompt=self.initial_prompt,
            code_source_info=self.source,
        )
        try:
            self._project_repo.save_project(name, project)
        except StorageFailure as e:
            self.error = e.message
            raise
        self.projects = self._project_repo.list_projects()
        logger.info("Saved project %r", name)
        return True

    def load_project(self, name: str) -> bool:
        """Replace the document with a saved project. Unknown names are a no-op."""
        project = self.projects.get(name)
        if project is None:
            logger.warning("Cannot load unknown project %r", name)
            return False
        self._supersede_inflight()
        self._replace_code(project.generated_code)
        self._set_initial_prompt(project.initial_prompt)
        self._set_source(CodeSourceInfo(type="saved", name=name))
        self._set_previous_code(None)
        self.refinement_prompt = ""
        self.error = None
        self.ledger.add_to_history(project.generated_code)
        logger.info("Loaded project %r", name)
        return True

    def delete_project(self, name: str) -> None:
        """
        Raises:
            StorageFailure: If the write is rejected; the error field is set
        """
        try:
            self._project_repo.delete_project(name)
        except StorageFailure as e:
            self.error = e.message
            raise
        self.projects = self._project_repo.list_projects()

    # -- clear all --

    def request_clear(self) -> None:
        self.pending_confirmation = ConfirmClear()

    def cancel_clear(self) -> None:
        if isinstance(self.pending_confirmation, ConfirmClear):
            self.pending_confirmation = None

    def confirm_clear(self) -> bool:
        """Reset everything and erase the persisted ledger. Destructive."""
        if not isinstance(self.pending_confirmation, ConfirmClear):
            return False
        self.pending_confirmation = None
        self._supersede_inflight()
        self._autosave.cancel()
        self.prompt = ""
        self.refinement_prompt = ""
        self.code = ""
        self.previous_code = None
        self.initial_prompt = None
        self.source = None
        self.error = None
        self.active_tab = "preview"
        self.comparison = None
        for key in (StoreKey.CODE, StoreKey.INITIAL_PROMPT, StoreKey.PREVIOUS_CODE, StoreKey.SOURCE_INFO):
            remove_quietly(self._store, key)
        self.ledger.clear_history()
        logger.info("Cleared session")
        return True

    # -- presentation state --

    def dismiss_error(self) -> None:
        self.error = None

    def set_active_tab(self, tab: ActiveTab) -> None:
        self.active_tab = tab

    def set_theme(self, theme: Theme) -> None:
        self.theme = theme
        set_quietly(self._store, StoreKey.THEME, theme)

    def toggle_theme(self) -> Theme:
        self.set_theme("light" if self.theme == "dark" else "dark")
        return self.theme

    def set_panel_width(self, percent: float) -> float:
        self.panel_width = clamp_panel_width(percent)
        set_quietly(self._store, StoreKey.PANEL_WIDTH, str(self.panel_width))
        return self.panel_width

    # -- export --

    def export_code(self, path: str | Path | None = None) -> Path | None:
        """
        Write the current document to a file. A directory gets the default file name.

        Returns:
            The written path, or None when there is nothing to export
        """
        try:
            _require(self.code, MSG_NOTHING_TO_EXPORT)
        except ValidationError as e:
            self._reject(e)
            return None
        target = Path(path) if path is not None else Path(EXPORT_FILE_NAME)
        if target.is_dir():
            target = target / EXPORT_FILE_NAME
        target.write_text(self.code, encoding="utf-8")
        return target

    # -- shutdown --

    async def aclose(self) -> None:
        """Write any pending autosave and close the importer this controller created."""
        self._autosave.flush()
        if self._owns_importer and self._importer is not None:
            await self._importer.aclose()
            self._importer = None
            self._owns_importer = False
