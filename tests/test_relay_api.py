import asyncio
import json

import httpx
import pytest

from docs_editor.api.v1.endpoints import gitlab as gitlab_routes
from docs_editor.relay import RelayError, parse_project_path

REPO_URL = "https://gitlab.com/my-org/my-repo.git"

GITLAB_TREE = [
    {"id": "aaa", "name": "src", "type": "tree", "path": "src", "mode": "040000"},
    {"id": "bbb", "name": "app.py", "type": "blob", "path": "src/app.py", "mode": "100644"},
    {"id": "ccc", "name": "README.md", "type": "blob", "path": "README.md", "mode": "100644"},
]


@pytest.mark.parametrize("url, expected", [
    ("https://gitlab.com/my-org/my-repo", "my-org/my-repo"),
    ("https://gitlab.com/my-org/my-repo.git", "my-org/my-repo"),
    ("git@gitlab.com/group/sub/project.git", "group/sub/project"),
])
def test_parse_project_path(url, expected):
    assert parse_project_path(url) == expected


def test_parse_project_path_rejects_other_hosts():
    with pytest.raises(RelayError) as info:
        parse_project_path("https://github.com/my-org/my-repo")
    assert info.value.status_code == 400


# == GitLab == #
def test_gitlab_files_flattens_and_builds_tree(client, gitlab):
    gitlab.handler = lambda request: httpx.Response(200, json=GITLAB_TREE)

    resp = client.post("/gitlab/files", json={"repoUrl": REPO_URL, "accessToken": "tok"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["files"] == [
        {"id": "src", "name": "src", "path": "src", "type": "folder"},
        {"id": "src_app_py", "name": "app.py", "path": "src/app.py", "type": "file"},
        {"id": "README_md", "name": "README.md", "path": "README.md", "type": "file"},
    ]
    assert [n["path"] for n in body["tree"]] == ["src", "README.md"]
    assert body["tree"][0]["children"][0]["path"] == "src/app.py"

    [request] = gitlab.requests
    assert request.url.raw_path.startswith(b"/api/v4/projects/my-org%2Fmy-repo/repository/tree?")
    assert request.url.params["recursive"] == "true"
    assert request.url.params["per_page"] == "100"
    assert request.headers["Authorization"] == "Bearer tok"


def test_gitlab_files_follows_pages(client, gitlab):
    def handler(request):
        if request.url.params["page"] == "1":
            return httpx.Response(200, json=GITLAB_TREE[:1], headers={"X-Next-Page": "2"})
        return httpx.Response(200, json=GITLAB_TREE[1:], headers={"X-Next-Page": ""})

    gitlab.handler = handler
    body = client.post("/gitlab/files", json={"repoUrl": REPO_URL, "accessToken": "tok"}).json()

    assert len(gitlab.requests) == 2
    assert [f["path"] for f in body["files"]] == ["src", "src/app.py", "README.md"]


def test_gitlab_files_validation(client, gitlab):
    resp = client.post("/gitlab/files", json={"repoUrl": REPO_URL})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Repository URL and access token are required"

    resp = client.post("/gitlab/files", json={"repoUrl": "https://example.com/x", "accessToken": "t"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid GitLab repository URL"
    assert gitlab.requests == []


def test_gitlab_upstream_status_is_passed_through(client, gitlab):
    gitlab.handler = lambda request: httpx.Response(401, json={"message": "401 Unauthorized"})

    resp = client.post("/gitlab/files", json={"repoUrl": REPO_URL, "accessToken": "bad"})

    assert resp.status_code == 401
    assert resp.json() == {
        "success": False,
        "error": "GitLab API error: 401",
        "details": {"message": "401 Unauthorized"},
    }


def test_gitlab_unreachable_is_502(client, gitlab):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    gitlab.handler = handler
    resp = client.post("/gitlab/files", json={"repoUrl": REPO_URL, "accessToken": "tok"})
    assert resp.status_code == 502
    assert resp.json()["error"] == "Failed to reach GitLab"


def test_gitlab_file_content(client, gitlab):
    gitlab.handler = lambda request: httpx.Response(200, text="# Guide\n")

    resp = client.post("/gitlab/file-content", json={
        "repoUrl": REPO_URL,
        "accessToken": "tok",
        "filePath": "docs/guide.md",
    })

    assert resp.json() == {"content": "# Guide\n", "message": "File content fetched successfully"}
    [request] = gitlab.requests
    assert request.url.raw_path.startswith(b"/api/v4/projects/my-org%2Fmy-repo/repository/files/docs%2Fguide.md/raw?")
    assert request.url.params["ref"] == "main"


def test_gitlab_file_content_custom_ref_and_validation(client, gitlab):
    gitlab.handler = lambda request: httpx.Response(200, text="x")
    client.post("/gitlab/file-content", json={
        "repoUrl": REPO_URL, "accessToken": "tok", "filePath": "a.md", "ref": "develop",
    })
    assert gitlab.requests[0].url.params["ref"] == "develop"

    resp = client.post("/gitlab/file-content", json={"repoUrl": REPO_URL, "accessToken": "tok"})
    assert resp.status_code == 400


# == batch import == #
def test_batch_import(client, gitlab, docs_root):
    def handler(request):
        if b"missing.md" in request.url.raw_path:
            return httpx.Response(404, text="404 File Not Found")
        return httpx.Response(200, text="print('remote')\n")

    gitlab.handler = handler
    resp = client.post("/import-gitlab/batch", json={
        "repoUrl": REPO_URL,
        "accessToken": "tok",
        "files": [
            {"name": "app.py", "path": "src/app.py"},
            {"name": "missing.md", "path": "missing.md"},
            {"name": "README.md", "path": "README.md", "content": "# Local copy"},
        ],
    })

    report = resp.json()
    assert resp.status_code == 200
    assert report["successCount"] == 2
    assert report["errorCount"] == 1
    assert report["autoDismiss"] is False
    assert report["statuses"][1] == {"fileName": "missing.md", "status": "error", "error": "GitLab API error: 404"}

    base = docs_root / "codebase" / "my-org_my-repo"
    assert (base / "src" / "app.py").read_text(encoding="utf-8").endswith("print('remote')\n")
    assert (base / "README.md").read_text(encoding="utf-8").endswith("# Local copy")
    assert not (base / "missing.md").exists()
    # README.md content was supplied, so only two upstream calls
    assert len(gitlab.requests) == 2


def test_batch_import_writes_off_the_event_loop(client, gitlab, monkeypatch):
    gitlab.handler = lambda request: httpx.Response(200, text="x")
    seen = []
    real = gitlab_routes.write_import

    def recording(*args):
        try:
            asyncio.get_running_loop()
            seen.append("loop")
        except RuntimeError:
            seen.append("worker")
        return real(*args)

    monkeypatch.setattr(gitlab_routes, "write_import", recording)
    resp = client.post("/import-gitlab/batch", json={
        "repoUrl": REPO_URL,
        "accessToken": "tok",
        "files": [{"name": "a.md", "path": "a.md"}],
    })

    assert resp.json()["successCount"] == 1
    assert seen == ["worker"]


def test_batch_import_requires_files(client):
    resp = client.post("/import-gitlab/batch", json={"repoUrl": REPO_URL, "accessToken": "tok", "files": []})
    assert resp.status_code == 400
    assert resp.json()["error"] == "No files selected"


# == AI relay == #
def test_ai_chat_forwards_body(client, ai_backend):
    reply = {"success": True, "data": {"response": "Done", "suggestedContent": "# New", "action": "edit"}}
    ai_backend.handler = lambda request: httpx.Response(200, json=reply)

    resp = client.post("/ai/chat", json={
        "message": "Improve intro",
        "currentContent": "# Old",
        "filePath": "README.md",
        "action": "edit",
        "selectedFiles": ["codebase/r/src/app.py"],
    })

    assert resp.json() == reply
    [request] = ai_backend.requests
    assert request.url.path == "/api/ai/chat"
    assert json.loads(request.content) == {
        "message": "Improve intro",
        "currentContent": "# Old",
        "filePath": "README.md",
        "action": "edit",
        "selectedFiles": ["codebase/r/src/app.py"],
    }


def test_ai_chat_defaults_action_and_drops_unset_fields(client, ai_backend):
    ai_backend.handler = lambda request: httpx.Response(200, json={"success": True, "data": {}})
    client.post("/ai/chat", json={"message": "hi"})
    assert json.loads(ai_backend.requests[0].content) == {"message": "hi", "action": "chat"}


def test_ai_chat_upstream_error(client, ai_backend):
    ai_backend.handler = lambda request: httpx.Response(503, json={"error": "Model busy", "details": "retry later"})

    resp = client.post("/ai/chat", json={"message": "hi"})

    assert resp.status_code == 503
    assert resp.json() == {"success": False, "error": "Model busy", "details": "retry later"}


def test_ai_chat_upstream_error_without_body(client, ai_backend):
    ai_backend.handler = lambda request: httpx.Response(500, text="")
    resp = client.post("/ai/chat", json={"message": "hi"})
    assert resp.status_code == 500
    assert resp.json() == {"success": False, "error": "Backend request failed"}


def test_ai_chat_requires_message(client, ai_backend):
    resp = client.post("/ai/chat", json={"message": "   "})
    assert resp.status_code == 400
    assert ai_backend.requests == []


def test_ai_chat_relays_unknown_fields(client, ai_backend):
    ai_backend.handler = lambda request: httpx.Response(200, json={"success": True, "data": {}})
    client.post("/ai/chat", json={"message": "hi", "temperature": 0.2, "history": [{"role": "user"}]})
    assert json.loads(ai_backend.requests[0].content) == {
        "message": "hi",
        "action": "chat",
        "temperature": 0.2,
        "history": [{"role": "user"}],
    }
