import logging
import re
from typing import Callable, Iterable, List

from .config import SEARCH_CONTEXT_LINES, SEARCH_RESULT_LIMIT
from .models import FileNode, Match, SearchResult
from .tree import iter_files

logger = logging.getLogger(__name__)

FILENAME_SCORE = 10
CONTENT_SCORE = 1


def context_around(lines: List[str], index: int, pattern: "re.Pattern[str]", radius: int = SEARCH_CONTEXT_LINES) -> str:
    """Lines around a match; the match line is quoted and the term emphasized."""
    start = max(0, index - radius)
    end = min(len(lines) - 1, index + radius)

    out = []
    for i in range(start, end + 1):
        line = lines[i].strip()
        if i == index:
            out.append("> " + pattern.sub(lambda m: f"**{m.group(0)}**", line))
        elif line:
            out.append(line)
    return "\n".join(out)


def search(
    query: str,
    tree: Iterable[FileNode],
    read_content: Callable[[str], str],
    limit: int = SEARCH_RESULT_LIMIT,
) -> List[SearchResult]:
    term = (query or "").strip().lower()
    if not term:
        return []

    pattern = re.compile(re.escape(term), re.IGNORECASE)
    results: List[SearchResult] = []

    for file in iter_files(tree):
        matches: List[Match] = []
        score = 0

        if term in file.name.lower():
            matches.append(Match(type="filename", text=file.name))
            score += FILENAME_SCORE

        try:
            content = read_content(file.path)
        except (OSError, ValueError):
            logger.exception("Error reading file content for search: %s", file.path)
            content = ""

        if content:
            lines = content.split("\n")
            for index, line in enumerate(lines):
                if term in line.lower():
                    matches.append(Match(
                        type="content",
                        line=index + 1,
                        text=line.strip(),
                        context=context_around(lines, index, pattern),
                    ))
                    score += CONTENT_SCORE

        if matches:
            results.append(SearchResult(file=file, matches=matches, score=score))

    # sorted() is stable: ties keep traversal order
    return sorted(results, key=lambda r: r.score, reverse=True)[:limit]
