import logging
import shutil
from pathlib import Path
from typing import List, Optional, Union

from .config import DOCS_ROOT, HIDDEN_PREFIX
from .models import FileNode
from .tree import node_id, sort_key

logger = logging.getLogger(__name__)


class UnsafePathError(ValueError):
    """Caller path is empty or resolves outside the docs root."""


class DocsStorage:
    """
    Sole reader/writer of the docs root.

    Every relative path goes through ``resolve`` before it is joined to the
    root, so ``..`` segments or absolute paths cannot reach outside it. OS
    errors are logged and turned into ``False`` / ``""``.
    """

    def __init__(self, root: Union[str, Path]) -> None:
        self.root = Path(root).resolve()

    # == paths == #
    def resolve(self, rel_path: str) -> Path:
        cleaned = (rel_path or "").strip().replace("\\", "/").lstrip("/")
        if not cleaned:
            raise UnsafePathError("Empty path")
        try:
            full = (self.root / cleaned).resolve()
        except ValueError:
            # embedded NUL
            raise UnsafePathError(f"Malformed path: {rel_path!r}") from None
        if not self._contains(full):
            raise UnsafePathError(f"Path escapes docs root: {rel_path}")
        if full == self.root:
            raise UnsafePathError("Path points at the docs root")
        return full

    def _contains(self, full: Path) -> bool:
        try:
            full.relative_to(self.root)
        except ValueError:
            return False
        return True

    def exists(self, rel_path: str) -> bool:
        return self.resolve(rel_path).exists()

    def is_folder(self, rel_path: str) -> bool:
        return self.resolve(rel_path).is_dir()

    # == listing == #
    def list(self) -> List[FileNode]:
        if not self.root.is_dir():
            logger.warning("Docs directory not found at: %s", self.root)
            return []
        return self._read_directory(self.root, "")

    def _read_directory(self, dir_path: Path, rel: str) -> List[FileNode]:
        items: List[FileNode] = []
        try:
            entries = list(dir_path.iterdir())
        except OSError:
            logger.exception("Error reading directory: %s", dir_path)
            return items

        for entry in entries:
            if entry.name.startswith(HIDDEN_PREFIX):
                continue
            item_path = f"{rel}/{entry.name}" if rel else entry.name
            if entry.is_symlink() and not self._listable_link(entry):
                continue
            if entry.is_dir():
                items.append(FileNode(
                    id=node_id(item_path),
                    name=entry.name,
                    path=item_path,
                    type="folder",
                    children=self._read_directory(entry, item_path),
                ))
            elif entry.is_file():
                items.append(FileNode(id=node_id(item_path), name=entry.name, path=item_path, type="file"))

        return sorted(items, key=sort_key)

    def _listable_link(self, entry: Path) -> bool:
        # links to files inside the root are listed; linked folders never are
        try:
            target = entry.resolve(strict=True)
        except (OSError, RuntimeError):
            logger.warning("Skipping broken or looping link: %s", entry)
            return False
        if not self._contains(target) or target.is_dir():
            logger.warning("Skipping link outside docs root or to a folder: %s", entry)
            return False
        return True

    # == read / write == #
    def read_content(self, rel_path: str) -> str:
        full = self.resolve(rel_path)
        try:
            if full.is_file():
                return full.read_text(encoding="utf-8", errors="replace")
        except OSError:
            logger.exception("Error reading file: %s", full)
        return ""

    def write(self, rel_path: str, content: str) -> bool:
        full = self.resolve(rel_path)
        try:
            full.parent.mkdir(parents=True, exist_ok=True)
            with full.open("w", encoding="utf-8", newline="") as handle:
                handle.write(content)
            return True
        except OSError:
            logger.exception("Error writing file: %s", full)
            return False

    def delete(self, rel_path: str) -> bool:
        full = self.resolve(rel_path)
        try:
            if full.is_dir():
                shutil.rmtree(full)
                return True
            if full.exists():
                full.unlink()
                return True
        except OSError:
            logger.exception("Error deleting file: %s", full)
        return False

    def create_folder(self, rel_path: str) -> bool:
        full = self.resolve(rel_path)
        if full.is_dir():
            return True
        try:
            full.mkdir(parents=True, exist_ok=True)
            return True
        except OSError:
            logger.exception("Error creating folder: %s", full)
            return False


_storage: Optional[DocsStorage] = None


def get_storage() -> DocsStorage:
    # FastAPI dependency; tests override it with a tmp_path root
    global _storage
    if _storage is None:
        _storage = DocsStorage(DOCS_ROOT)
    return _storage
