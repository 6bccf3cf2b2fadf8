"""
Tree building and tree mutation over ``FileNode`` lists.

Every mutation returns a new list. Only the nodes on the way to a target are
copied; untouched siblings and subtrees are reused as-is so callers can keep
comparing them by identity.
"""
import re
from typing import Any, Callable, Dict, Iterable, Iterator, List, Mapping, Optional

from .models import FileNode


class TreeError(ValueError):
    pass


_ID_PATTERN = re.compile(r"[^A-Za-z0-9]")


def node_id(path: str) -> str:
    return _ID_PATTERN.sub("_", path)


def sort_key(node: FileNode):
    # folders first, then by name
    return (0 if node.is_folder else 1, node.name)


# == traversal == #
def walk(nodes: Iterable[FileNode]) -> Iterator[FileNode]:
    """Depth-first, pre-order, in sibling order."""
    for node in nodes:
        yield node
        if node.children:
            yield from walk(node.children)


def find_by_path(nodes: Iterable[FileNode], path: str) -> Optional[FileNode]:
    for node in walk(nodes):
        if node.path == path:
            return node
    return None


def iter_files(nodes: Iterable[FileNode]) -> Iterator[FileNode]:
    return (node for node in walk(nodes) if not node.is_folder)


def transform(
    nodes: List[FileNode],
    predicate: Callable[[FileNode], bool],
    fn: Callable[[FileNode], Optional[FileNode]],
) -> List[FileNode]:
    """
    Rebuild ``nodes`` with ``fn`` applied to every node matching ``predicate``.

    ``fn`` returns the replacement node, or None to drop the node (and its
    subtree). Matched nodes are not descended into. When nothing below a list
    matches, the very same list object is returned.
    """
    result: List[FileNode] = []
    changed = False
    for node in nodes:
        if predicate(node):
            replacement = fn(node)
            changed = True
            if replacement is not None:
                result.append(replacement)
            continue

        if node.children:
            children = transform(node.children, predicate, fn)
            if children is not node.children:
                node = node.model_copy(update={"children": children})
                changed = True
        result.append(node)

    return result if changed else nodes


# == mutations == #
def insert(tree: List[FileNode], new_node: FileNode, parent_path: Optional[str] = None) -> List[FileNode]:
    if not parent_path:
        return [*tree, new_node]

    parent = find_by_path(tree, parent_path)
    if parent is None or not parent.is_folder:
        raise TreeError(f"No folder at '{parent_path}'")

    return transform(
        tree,
        lambda n: n.path == parent_path and n.is_folder,
        lambda n: n.model_copy(update={"children": [*(n.children or []), new_node]}),
    )


def remove(tree: List[FileNode], target_path: str) -> List[FileNode]:
    # every occurrence, at any depth
    return transform(tree, lambda n: n.path == target_path, lambda n: None)


def update_content(tree: List[FileNode], target_path: str, content: str) -> List[FileNode]:
    return transform(
        tree,
        lambda n: n.path == target_path,
        lambda n: n.model_copy(update={"content": content}),
    )


def sort_tree(nodes: List[FileNode]) -> List[FileNode]:
    ordered = sorted(nodes, key=sort_key)
    for node in ordered:
        if node.children:
            node.children = sort_tree(node.children)
    return ordered


# == flat list -> tree == #
def _entry_sort_key(entry: Mapping[str, Any]):
    return (0 if entry.get("type") == "folder" else 1, entry.get("path", ""))


def build_tree(entries: Iterable[Mapping[str, Any]]) -> List[FileNode]:
    """
    Turn a flat ``[{id?, path, type, size?}]`` listing into a nested tree.

    Ancestors missing from the listing are synthesized as ``folder-<path>``
    nodes. Duplicate paths keep the first entry (after sorting).
    """
    tree: List[FileNode] = []
    path_map: Dict[str, FileNode] = {}

    for entry in sorted(entries, key=_entry_sort_key):
        parts = [p for p in str(entry.get("path", "")).split("/") if p]
        if not parts:
            continue
        path = "/".join(parts)
        if path in path_map:
            continue

        level = _parent_level(tree, path_map, parts)
        if level is None:
            continue  # an ancestor is a file

        is_folder = entry.get("type") == "folder"
        node = FileNode(
            id=entry.get("id") or node_id(path),
            name=parts[-1],
            path=path,
            type="folder" if is_folder else "file",
            size=entry.get("size"),
            children=[] if is_folder else None,
        )
        path_map[path] = node
        level.append(node)

    return sort_tree(tree)


def _parent_level(tree: List[FileNode], path_map: Dict[str, FileNode], parts: List[str]) -> Optional[List[FileNode]]:
    # walk/create the ancestors of parts[-1], returning the list to attach to
    level = tree
    current = ""
    for segment in parts[:-1]:
        current = f"{current}/{segment}" if current else segment
        parent = path_map.get(current)
        if parent is None:
            parent = FileNode(id=f"folder-{current}", name=segment, path=current, type="folder", children=[])
            path_map[current] = parent
            level.append(parent)
        elif not parent.is_folder:
            return None
        level = parent.children
    return level
