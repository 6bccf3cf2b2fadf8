from pydantic import BaseModel
from typing import List, Literal, Optional

from .FileNode import FileNode


class Match(BaseModel):
    type: Literal["filename", "content"]
    line: Optional[int] = None
    text: Optional[str] = None
    context: Optional[str] = None


class SearchResult(BaseModel):
    file: FileNode
    matches: List[Match]
    score: int
