from pydantic import BaseModel
from typing import List, Literal, Optional


# One file or folder of a docs tree (local or remote)
class FileNode(BaseModel):
    id: str
    name: str
    path: str
    type: Literal["file", "folder"]
    children: Optional[List["FileNode"]] = None  # folders only
    content: Optional[str] = None  # None = not loaded yet
    size: Optional[int] = None  # remote nodes only

    @property
    def is_folder(self) -> bool:
        return self.type == "folder"


FileNode.model_rebuild()
