import httpx
from fastapi import APIRouter, Depends, HTTPException
from fastapi.concurrency import run_in_threadpool

from ....importer import ImportOrchestrator, write_import
from ....models import GitlabFileContentRequest, GitlabFilesRequest, ImportBatchRequest, ImportFile
from ....relay import GitLabRelay, parse_project_path
from ....storage import DocsStorage, get_storage
from ....tree import build_tree
from ....utils.util import get_gitlab_client

router = APIRouter(tags=["gitlab"])


# == remote repository == #
@router.post("/gitlab/files")
async def list_gitlab_files(
    req: GitlabFilesRequest,
    gitlab_client: httpx.AsyncClient = Depends(get_gitlab_client),
):
    if not req.repoUrl or not req.accessToken:
        raise HTTPException(400, detail="Repository URL and access token are required")

    files = await GitLabRelay(gitlab_client).list_files(req.repoUrl, req.accessToken)
    tree = build_tree(files)
    return {
        "files": files,
        "tree": [node.model_dump(exclude_none=True) for node in tree],
        "message": "Files fetched successfully",
    }


@router.post("/gitlab/file-content")
async def get_gitlab_file_content(
    req: GitlabFileContentRequest,
    gitlab_client: httpx.AsyncClient = Depends(get_gitlab_client),
):
    if not req.repoUrl or not req.accessToken or not req.filePath:
        raise HTTPException(400, detail="Repository URL, access token, and file path are required")

    content = await GitLabRelay(gitlab_client).file_content(req.repoUrl, req.accessToken, req.filePath, req.ref)
    return {"content": content, "message": "File content fetched successfully"}


# == bulk import == #
@router.post("/import-gitlab/batch")
async def import_gitlab_batch(
    req: ImportBatchRequest,
    storage: DocsStorage = Depends(get_storage),
    gitlab_client: httpx.AsyncClient = Depends(get_gitlab_client),
):
    if not req.repoUrl or not req.accessToken:
        raise HTTPException(400, detail="Repository URL and access token are required")
    if not req.files:
        raise HTTPException(400, detail="No files selected")

    repo_name = parse_project_path(req.repoUrl)
    relay = GitLabRelay(gitlab_client)

    async def fetch_content(file: ImportFile) -> str:
        return await relay.file_content(req.repoUrl, req.accessToken, file.path, req.ref)

    async def import_file(file: ImportFile, content: str, repo: str):
        return await run_in_threadpool(write_import, storage, file.name, file.path, content, repo)

    report = await ImportOrchestrator(fetch_content, import_file).run(req.files, repo_name)
    return report
