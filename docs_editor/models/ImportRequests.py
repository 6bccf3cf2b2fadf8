from pydantic import BaseModel
from typing import List, Optional


# Single remote file written locally with a provenance header
class ImportGitlabRequest(BaseModel):
    fileName: Optional[str] = None
    filePath: Optional[str] = None
    content: Optional[str] = None
    repoName: Optional[str] = None


class ImportFile(BaseModel):
    name: str
    path: str
    content: Optional[str] = None  # fetched from GitLab when missing


class ImportBatchRequest(BaseModel):
    repoUrl: Optional[str] = None
    accessToken: Optional[str] = None
    files: List[ImportFile] = []
    ref: Optional[str] = None
