import json
from pathlib import Path

from thymescan.resolvers.fragments import build_fragment_catalog
from thymescan.utils.scaffold import scaffold_workspace


def test_creates_workspace(tmp_path: Path):
    workspace = scaffold_workspace(tmp_path / "out", "Demo Site")
    assert workspace == tmp_path / "out" / "demo-site"

    assert (workspace / "templates" / "index.html").is_file()
    assert (workspace / "templates" / "layouts" / "default.html").is_file()
    assert (workspace / "static" / "css" / "main.css").is_file()

    data = json.loads((workspace / "data" / "global.json").read_text(encoding="utf-8"))
    assert data["siteName"] == "Demo Site"


def test_templates_are_copied_verbatim(tmp_path: Path):
    workspace = scaffold_workspace(tmp_path, "Demo")
    index = (workspace / "templates" / "index.html").read_text(encoding="utf-8")
    assert "${page.title}" in index

    catalog = build_fragment_catalog(workspace / "templates")
    assert [d.name for d in catalog["fragments/header"]] == ["header"]


def test_custom_folder_names(tmp_path: Path):
    workspace = scaffold_workspace(tmp_path, "Shop", template_path="views", static_path="public", data_path="mock")
    assert (workspace / "views" / "index.html").is_file()
    assert (workspace / "public" / "css" / "main.css").is_file()
    assert (workspace / "mock" / "index.json").is_file()


def test_existing_workspace_is_not_overwritten(tmp_path: Path):
    assert scaffold_workspace(tmp_path, "Demo") is not None
    assert scaffold_workspace(tmp_path, "Demo") is None
    assert scaffold_workspace(tmp_path, "Demo", overwrite=True) is not None
