# docs_editor/models/__init__.py
from .FileNode import FileNode
from .SearchResult import Match, SearchResult
from .ImportStatus import ImportStatus, ImportReport
from .DocsRequests import SaveRequest, CreateRequest, DeleteRequest
from .ImportRequests import ImportGitlabRequest, ImportFile, ImportBatchRequest
from .RelayRequests import GitlabFilesRequest, GitlabFileContentRequest, AIChatRequest

__all__ = [
    "FileNode",
    "Match",
    "SearchResult",
    "ImportStatus",
    "ImportReport",
    "SaveRequest",
    "CreateRequest",
    "DeleteRequest",
    "ImportGitlabRequest",
    "ImportFile",
    "ImportBatchRequest",
    "GitlabFilesRequest",
    "GitlabFileContentRequest",
    "AIChatRequest",
]
