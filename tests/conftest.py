"""
Shared fixtures: a small preview workspace on disk and its configuration.
"""
from pathlib import Path

import pytest

from thymescan.config.project import ProjectConfig

HEADER_FRAGMENT = (
    "<html xmlns:th=\"http://www.thymeleaf.org\">\n"
    "<body>\n"
    "<header th:fragment=\"header(title)\">\n"
    "    <h1 th:text=\"${title}\">Title</h1>\n"
    "</header>\n"
    "<footer th:fragment=\"footer\">Footer</footer>\n"
    "</body>\n"
    "</html>\n"
)

INDEX_PAGE = (
    "<html xmlns:th=\"http://www.thymeleaf.org\">\n"
    "<head><link rel=\"stylesheet\" th:href=\"@{/css/main.css}\"></head>\n"
    "<body>\n"
    "<div th:replace=\"fragments/header :: header(title=${page.title})\"></div>\n"
    "<ul><li th:each=\"item : ${items}\" th:text=\"${item.title}\">Item</li></ul>\n"
    "<img th:src=\"@{/images/logo}\">\n"
    "<div th:replace=\"fragments/missing :: nothing\"></div>\n"
    "</body>\n"
    "</html>\n"
)


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Workspace with templates/, static/ and an empty data/ folder."""
    templates = tmp_path / "templates"
    (templates / "fragments").mkdir(parents=True)
    (templates / "fragments" / "header.html").write_text(HEADER_FRAGMENT, encoding="utf-8")
    (templates / "index.html").write_text(INDEX_PAGE, encoding="utf-8")

    static = tmp_path / "static"
    (static / "css").mkdir(parents=True)
    (static / "images").mkdir(parents=True)
    (static / "css" / "main.css").write_text("body {}\n", encoding="utf-8")
    (static / "images" / "logo.png").write_bytes(b"\x89PNG")

    (tmp_path / "data").mkdir()
    return tmp_path


@pytest.fixture
def config(workspace: Path) -> ProjectConfig:
    return ProjectConfig(workspace_path=workspace)
