from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import PlainTextResponse

from ....config import DEFAULT_FILE_CONTENT
from ....importer import ImportWriteError, write_import
from ....models import CreateRequest, DeleteRequest, FileNode, ImportGitlabRequest, SaveRequest, SearchResult
from ....search import search
from ....storage import DocsStorage, get_storage

router = APIRouter(tags=["docs"])


# == file tree == #
@router.get("/files", response_model=List[FileNode], response_model_exclude_none=True)
def list_files(storage: DocsStorage = Depends(get_storage)):
    return storage.list()


@router.get("/content", response_class=PlainTextResponse)
def read_content(path: str = Query(""), storage: DocsStorage = Depends(get_storage)):
    if not path:
        raise HTTPException(400, detail="File path is required")
    return PlainTextResponse(storage.read_content(path))


@router.put("/save")
def save_file(req: SaveRequest, storage: DocsStorage = Depends(get_storage)):
    if not req.path or req.content is None:
        raise HTTPException(400, detail="File path and content are required")

    if not storage.write(req.path, req.content):
        raise HTTPException(500, detail="Failed to save file")
    return {"message": "File saved successfully"}


@router.post("/create")
def create_file(req: CreateRequest, storage: DocsStorage = Depends(get_storage)):
    if not req.path:
        raise HTTPException(400, detail="File path is required")

    # reject-on-conflict for files, idempotent for folders
    if req.type == "folder":
        if storage.exists(req.path) and not storage.is_folder(req.path):
            raise HTTPException(status.HTTP_409_CONFLICT, detail=f"A file already exists at '{req.path}'")
        ok = storage.create_folder(req.path)
    else:
        if storage.exists(req.path):
            raise HTTPException(status.HTTP_409_CONFLICT, detail=f"'{req.path}' already exists")
        ok = storage.write(req.path, req.content if req.content is not None else DEFAULT_FILE_CONTENT)

    if not ok:
        raise HTTPException(500, detail=f"Failed to create {req.type}")

    label = "Folder" if req.type == "folder" else "File"
    return {"message": f"{label} created successfully", "path": req.path}


@router.delete("/delete")
def delete_file(req: DeleteRequest, storage: DocsStorage = Depends(get_storage)):
    if not req.path:
        raise HTTPException(400, detail="File path is required")

    if not storage.exists(req.path):
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail=f"'{req.path}' not found")
    if not storage.delete(req.path):
        raise HTTPException(500, detail="Failed to delete file")
    return {"message": "File deleted successfully"}


# == search == #
@router.get("/search", response_model=List[SearchResult], response_model_exclude_none=True)
def search_docs(q: str = Query(""), storage: DocsStorage = Depends(get_storage)):
    if not q.strip():
        return []
    return search(q, storage.list(), storage.read_content)


# == single-file import == #
@router.post("/import-gitlab")
def import_gitlab_file(req: ImportGitlabRequest, storage: DocsStorage = Depends(get_storage)):
    if not req.fileName or not req.filePath or req.content is None:
        raise HTTPException(400, detail="File name, path, and content are required")

    try:
        return write_import(storage, req.fileName, req.filePath, req.content, req.repoName)
    except ImportWriteError as e:
        raise HTTPException(500, detail=str(e)) from e
