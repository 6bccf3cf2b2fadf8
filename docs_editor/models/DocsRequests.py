from pydantic import BaseModel
from typing import Literal, Optional

# Required fields are checked in the handlers (400 with a static message)


class SaveRequest(BaseModel):
    path: Optional[str] = None
    content: Optional[str] = None


class CreateRequest(BaseModel):
    path: Optional[str] = None
    content: Optional[str] = None
    type: Literal["file", "folder"] = "file"


class DeleteRequest(BaseModel):
    path: Optional[str] = None
