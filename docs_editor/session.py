"""
Client-side editor state over the docs HTTP API.

``EditorSession`` keeps the file tree, the selected file and the last saved
content. Every state change goes through ``dispatch`` so tree updates live in
one place. Create and delete are applied optimistically and undone with the
inverse mutation if the server refuses them.
"""
import logging
import threading
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

import httpx

from .config import DEFAULT_FILE_CONTENT
from .models import FileNode
from .tree import TreeError, find_by_path, insert, iter_files, node_id, remove, update_content

logger = logging.getLogger(__name__)


class DocsApiError(Exception):
    def __init__(self, status_code: int, error: str) -> None:
        super().__init__(error)
        self.status_code = status_code
        self.error = error


class DocsClient:
    """Thin wrapper around the docs routes; ``http`` may be any ``httpx.Client``."""

    def __init__(self, http: httpx.Client) -> None:
        self.http = http

    def _check(self, resp: httpx.Response) -> httpx.Response:
        if resp.is_error:
            try:
                error = resp.json().get("error") or resp.reason_phrase
            except ValueError:
                error = resp.text or resp.reason_phrase
            raise DocsApiError(resp.status_code, error)
        return resp

    def list_files(self) -> List[FileNode]:
        resp = self._check(self.http.get("/files"))
        return [FileNode.model_validate(item) for item in resp.json()]

    def read(self, path: str) -> str:
        return self._check(self.http.get("/content", params={"path": path})).text

    def save(self, path: str, content: str) -> None:
        self._check(self.http.put("/save", json={"path": path, "content": content}))

    def create(self, path: str, type: str, content: Optional[str] = None) -> Dict[str, Any]:
        body: Dict[str, Any] = {"path": path, "type": type}
        if content is not None:
            body["content"] = content
        return self._check(self.http.post("/create", json=body)).json()

    def delete(self, path: str) -> None:
        self._check(self.http.request("DELETE", "/delete", json={"path": path}))


# == state == #
@dataclass(frozen=True)
class EditorState:
    files: List[FileNode] = field(default_factory=list)
    selected_path: Optional[str] = None
    saved_content: Dict[str, str] = field(default_factory=dict)


def reduce(state: EditorState, action: Dict[str, Any]) -> EditorState:
    kind = action["type"]
    if kind == "loaded":
        return replace(state, files=action["files"], selected_path=None, saved_content={})
    if kind == "inserted":
        return replace(state, files=insert(state.files, action["node"], action.get("parent_path")))
    if kind == "removed":
        selected = state.selected_path
        if selected is not None and (selected == action["path"] or selected.startswith(action["path"] + "/")):
            selected = None
        return replace(state, files=remove(state.files, action["path"]), selected_path=selected)
    if kind == "restored":
        return replace(state, files=action["files"], selected_path=action.get("selected_path", state.selected_path))
    if kind == "content":
        return replace(state, files=update_content(state.files, action["path"], action["content"]))
    if kind == "selected":
        return replace(state, selected_path=action["path"])
    if kind == "saved":
        return replace(state, saved_content={**state.saved_content, action["path"]: action["content"]})
    raise ValueError(f"Unknown action: {kind}")


def editor_stats(content: str) -> Dict[str, int]:
    stripped = content.strip()
    return {
        "lines": len(content.split("\n")),
        "words": len(stripped.split()) if stripped else 0,
        "characters": len(content),
        "charactersNoSpaces": len("".join(content.split())),
    }


class EditorSession:
    def __init__(self, client: DocsClient) -> None:
        self.client = client
        self.state = EditorState()
        self._save_lock = threading.Lock()

    def dispatch(self, action: Dict[str, Any]) -> EditorState:
        self.state = reduce(self.state, action)
        return self.state

    @property
    def files(self) -> List[FileNode]:
        return self.state.files

    @property
    def selected(self) -> Optional[FileNode]:
        if self.state.selected_path is None:
            return None
        return find_by_path(self.state.files, self.state.selected_path)

    # == loading / selection == #
    def load(self) -> List[FileNode]:
        self.dispatch({"type": "loaded", "files": self.client.list_files()})
        readme = next((n for n in _iter_named(self.files, "README.md")), None)
        if readme is not None:
            self.select(readme.path)
        return self.files

    def select(self, path: str) -> FileNode:
        node = find_by_path(self.files, path)
        if node is None or node.is_folder:
            raise TreeError(f"No file at '{path}'")
        if node.content is None:
            content = self.client.read(path)
            self.dispatch({"type": "content", "path": path, "content": content})
            self.dispatch({"type": "saved", "path": path, "content": content})
        self.dispatch({"type": "selected", "path": path})
        return self.selected

    # == optimistic mutations == #
    def create(self, name: str, type: str = "file", parent_path: Optional[str] = None) -> FileNode:
        new_path = f"{parent_path}/{name}" if parent_path else name
        if find_by_path(self.files, new_path) is not None:
            raise TreeError(f"A {type} with the name '{name}' already exists in this location")

        content = DEFAULT_FILE_CONTENT if type == "file" else None
        node = FileNode(
            id=node_id(new_path),
            name=name,
            path=new_path,
            type=type,
            content=content,
            children=[] if type == "folder" else None,
        )
        self.dispatch({"type": "inserted", "node": node, "parent_path": parent_path})
        try:
            self.client.create(new_path, type, content)
        except (DocsApiError, httpx.HTTPError):
            logger.warning("Create of %s failed, reverting", new_path)
            self.dispatch({"type": "removed", "path": new_path})
            raise

        if type == "file":
            self.dispatch({"type": "saved", "path": new_path, "content": content})
            self.dispatch({"type": "selected", "path": new_path})
        return node

    def delete(self, path: str) -> None:
        before = self.state
        self.dispatch({"type": "removed", "path": path})
        try:
            self.client.delete(path)
        except (DocsApiError, httpx.HTTPError):
            logger.warning("Delete of %s failed, restoring", path)
            self.dispatch({"type": "restored", "files": before.files, "selected_path": before.selected_path})
            raise

    # == editing == #
    def edit(self, content: str) -> None:
        if self.state.selected_path is None:
            raise TreeError("No file selected")
        self.dispatch({"type": "content", "path": self.state.selected_path, "content": content})

    def is_dirty(self) -> bool:
        node = self.selected
        if node is None or node.content is None:
            return False
        return self.state.saved_content.get(node.path) != node.content

    def save(self) -> bool:
        """
        Save the selected file. Returns False when nothing was sent: no
        selection, no change since the last save, or another save in flight.
        """
        if not self.is_dirty():
            return False
        if not self._save_lock.acquire(blocking=False):
            return False
        try:
            node = self.selected
            self.client.save(node.path, node.content)
            self.dispatch({"type": "saved", "path": node.path, "content": node.content})
            return True
        finally:
            self._save_lock.release()


def _iter_named(nodes: List[FileNode], name: str):
    return (n for n in iter_files(nodes) if n.name == name)
