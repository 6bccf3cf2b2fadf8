import pytest

from docs_editor.storage import DocsStorage, UnsafePathError


def test_list_sorts_folders_first_and_skips_hidden(storage, docs_root):
    (docs_root / "zeta").mkdir()
    (docs_root / "zeta" / "b.md").write_text("b", encoding="utf-8")
    (docs_root / "alpha.md").write_text("a", encoding="utf-8")
    (docs_root / "README.md").write_text("r", encoding="utf-8")
    (docs_root / ".git").mkdir()
    (docs_root / ".hidden.md").write_text("h", encoding="utf-8")

    tree = storage.list()

    assert [n.name for n in tree] == ["zeta", "README.md", "alpha.md"]
    zeta = tree[0]
    assert zeta.type == "folder"
    assert zeta.id == "zeta"
    assert [c.path for c in zeta.children] == ["zeta/b.md"]
    assert zeta.children[0].id == "zeta_b_md"
    assert tree[1].children is None


def test_list_missing_root_is_empty(tmp_path, caplog):
    storage = DocsStorage(tmp_path / "nope")
    assert storage.list() == []
    assert "Docs directory not found" in caplog.text


def test_read_missing_file_is_empty(storage):
    assert storage.read_content("missing.md") == ""


def test_write_creates_parents_and_overwrites(storage, docs_root):
    assert storage.write("guides/setup/install.md", "v1")
    assert storage.write("guides/setup/install.md", "v2")
    assert (docs_root / "guides" / "setup" / "install.md").read_text(encoding="utf-8") == "v2"
    assert storage.read_content("guides/setup/install.md") == "v2"


@pytest.mark.parametrize("bad", ["../outside.md", "a/../../outside.md", "..", ""])
def test_write_outside_root_is_rejected(storage, docs_root, bad):
    with pytest.raises(UnsafePathError):
        storage.write(bad, "nope")
    assert not (docs_root.parent / "outside.md").exists()


def test_every_operation_checks_containment(storage):
    for op in (storage.read_content, storage.delete, storage.create_folder, storage.exists):
        with pytest.raises(UnsafePathError):
            op("../etc")


def test_inner_dotdot_that_stays_inside_is_allowed(storage, docs_root):
    assert storage.write("a/../b.md", "ok")
    assert (docs_root / "b.md").read_text(encoding="utf-8") == "ok"


def test_delete_file_and_folder(storage, docs_root):
    storage.write("f/one.md", "1")
    storage.write("f/sub/two.md", "2")
    storage.write("keep.md", "k")

    assert storage.delete("f")
    assert not (docs_root / "f").exists()
    assert storage.delete("keep.md")
    assert not storage.delete("keep.md")


def test_create_folder_is_idempotent(storage, docs_root):
    assert storage.create_folder("a/b")
    assert storage.create_folder("a/b")
    assert (docs_root / "a" / "b").is_dir()


def test_nul_byte_in_path_is_rejected(storage):
    with pytest.raises(UnsafePathError):
        storage.read_content("a\x00b")


def test_list_skips_links_leaving_the_root(storage, docs_root, tmp_path):
    secret = tmp_path / "secret"
    secret.mkdir()
    (secret / "passwords.txt").write_text("hunter2", encoding="utf-8")
    (docs_root / "link").symlink_to(secret, target_is_directory=True)
    (docs_root / "pw.txt").symlink_to(secret / "passwords.txt")
    (docs_root / "real.md").write_text("r", encoding="utf-8")

    assert [n.path for n in storage.list()] == ["real.md"]


def test_list_does_not_follow_looping_links(storage, docs_root):
    (docs_root / "real.md").write_text("r", encoding="utf-8")
    (docs_root / "loop").symlink_to(docs_root, target_is_directory=True)
    (docs_root / "a").symlink_to(docs_root / "b")
    (docs_root / "b").symlink_to(docs_root / "a")

    assert [n.path for n in storage.list()] == ["real.md"]


def test_list_keeps_file_links_inside_the_root(storage, docs_root):
    (docs_root / "real.md").write_text("r", encoding="utf-8")
    (docs_root / "alias.md").symlink_to(docs_root / "real.md")

    assert [n.path for n in storage.list()] == ["alias.md", "real.md"]
