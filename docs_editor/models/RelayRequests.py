from pydantic import BaseModel, ConfigDict
from typing import List, Optional


class GitlabFilesRequest(BaseModel):
    repoUrl: Optional[str] = None
    accessToken: Optional[str] = None


class GitlabFileContentRequest(BaseModel):
    repoUrl: Optional[str] = None
    accessToken: Optional[str] = None
    filePath: Optional[str] = None
    ref: Optional[str] = None


class AIChatRequest(BaseModel):
    # unknown fields are relayed to the AI backend untouched
    model_config = ConfigDict(extra="allow")

    message: Optional[str] = None
    currentContent: Optional[str] = None
    filePath: Optional[str] = None
    action: Optional[str] = None
    selectedFiles: Optional[List[str]] = None
