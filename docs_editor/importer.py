"""
Importing remote (GitLab) files into the docs root.

Imported files land under ``codebase/<repo>/`` with their original relative
path, prefixed by a provenance header recording where they came from and when.
"""
import asyncio
import logging
import posixpath
import re
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence

from .config import CODEBASE_FOLDER, IMPORT_AUTO_DISMISS_SECONDS, IMPORT_STEP_DELAY
from .models import ImportFile, ImportReport, ImportStatus
from .storage import DocsStorage, UnsafePathError

logger = logging.getLogger(__name__)

DOC_EXTENSIONS = {".md", ".txt", ".rst"}
C_STYLE_EXTENSIONS = {".js", ".ts", ".java", ".cpp", ".c", ".go", ".rs"}
PYTHON_EXTENSIONS = {".py"}

_REPO_NAME_PATTERN = re.compile(r"[^A-Za-z0-9_-]")


class ImportWriteError(RuntimeError):
    pass


def sanitize_repo_name(repo_name: Optional[str]) -> str:
    if not repo_name:
        return "imported"
    return _REPO_NAME_PATTERN.sub("_", repo_name)


def import_destination(file_path: str, repo_name: Optional[str]) -> str:
    # only the repo segment is sanitized; file_path keeps its structure
    prefix = posixpath.join(CODEBASE_FOLDER, sanitize_repo_name(repo_name))
    destination = posixpath.normpath(posixpath.join(prefix, file_path.lstrip("/")))
    if not destination.startswith(prefix + "/"):
        raise UnsafePathError(f"Import path escapes {prefix}: {file_path}")
    return destination


def _comment_delimiters(extension: str):
    if extension in DOC_EXTENSIONS:
        return "<!--", "-->"
    if extension in PYTHON_EXTENSIONS:
        return '"""', '"""'
    if extension in C_STYLE_EXTENSIONS:
        return "/*", "*/"
    return None


def provenance_header(file_name: str, original_path: str, imported_at: Optional[datetime] = None) -> str:
    """Comment block for ``file_name``'s language, or "" for unknown extensions."""
    delimiters = _comment_delimiters(posixpath.splitext(file_name)[1].lower())
    if delimiters is None:
        return ""
    start, end = delimiters
    stamp = (imported_at or datetime.now(timezone.utc)).isoformat()
    return (
        f"{start}\n"
        "Imported from GitLab Repository\n"
        f"Original Path: {original_path}\n"
        f"Import Date: {stamp}\n"
        f"{end}\n\n"
    )


def with_provenance(file_name: str, original_path: str, content: str, imported_at: Optional[datetime] = None) -> str:
    return provenance_header(file_name, original_path, imported_at) + content


def write_import(storage: DocsStorage, file_name: str, file_path: str, content: str, repo_name: Optional[str]) -> Dict[str, Any]:
    """Write one remote file under the codebase namespace; raises ImportWriteError on failure."""
    destination = import_destination(file_path, repo_name)
    processed = with_provenance(file_name, file_path, content)
    if not storage.write(destination, processed):
        raise ImportWriteError("Failed to import file")
    logger.info("Imported %s -> %s", file_path, destination)
    return {
        "message": "File imported successfully",
        "importPath": destination,
        "originalPath": file_path,
        "size": len(processed),
    }


# == batch import == #
FetchContent = Callable[[ImportFile], Awaitable[str]]
ImportOne = Callable[[ImportFile, str, str], Awaitable[Dict[str, Any]]]
ProgressCallback = Callable[[List[ImportStatus]], None]


class ImportOrchestrator:
    """
    Imports files one at a time, in selection order.

    ``fetch_content(file)`` returns the remote text for files that were not
    fetched yet; ``import_file(file, content, repo_name)`` writes one file.
    Either may raise; the error message is recorded on that file's status and
    the batch moves on. Nothing is rolled back.
    """

    def __init__(
        self,
        fetch_content: FetchContent,
        import_file: ImportOne,
        step_delay: float = IMPORT_STEP_DELAY,
        on_progress: Optional[ProgressCallback] = None,
    ) -> None:
        self.fetch_content = fetch_content
        self.import_file = import_file
        self.step_delay = step_delay
        self.on_progress = on_progress

    def _notify(self, statuses: List[ImportStatus]) -> None:
        if self.on_progress is not None:
            self.on_progress(statuses)

    async def run(self, files: Sequence[ImportFile], repo_name: str) -> ImportReport:
        statuses = [ImportStatus(fileName=f.name) for f in files]
        self._notify(statuses)

        for file, status in zip(files, statuses):
            status.status = "importing"
            self._notify(statuses)
            try:
                content = file.content
                if content is None:
                    content = await self.fetch_content(file)
                await self.import_file(file, content or "", repo_name)
                status.status = "success"
            except Exception as e:
                logger.warning("Import of %s failed: %s", file.path, e)
                status.status = "error"
                status.error = str(e) or "Import failed"
            self._notify(statuses)

            if self.step_delay:
                await asyncio.sleep(self.step_delay)

        success = sum(1 for s in statuses if s.status == "success")
        errors = len(statuses) - success
        logger.info("Import of %d file(s) from %s finished: %d ok, %d failed", len(statuses), repo_name, success, errors)
        return ImportReport(
            statuses=statuses,
            successCount=success,
            errorCount=errors,
            autoDismiss=errors == 0,
            autoDismissSeconds=IMPORT_AUTO_DISMISS_SECONDS if errors == 0 else None,
        )
