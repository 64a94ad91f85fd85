"""Shared test fixtures."""

import json
from collections.abc import Callable
from pathlib import Path

import pytest
from docroute.config import (
    Config,
    DocsConfig,
    LiveReloadConfig,
    ResourcesConfig,
    ServerConfig,
    SiteConfig,
)
from docroute.core.documents import Document, DocumentCatalog
from docroute.core.types import DocId

CatalogFactory = Callable[..., DocumentCatalog]


@pytest.fixture
def make_catalog() -> CatalogFactory:
    """Factory for in-memory document catalogs.

    Positional arguments are doc ids; keyword ``slugs`` maps ids to slugs.
    """

    def factory(*doc_ids: str, slugs: dict[str, str] | None = None) -> DocumentCatalog:
        slugs = slugs or {}
        documents = [
            Document(
                id=DocId(doc_id),
                title=doc_id.rsplit("/", 1)[-1].replace("-", " ").title(),
                source_path=Path(f"{doc_id}.md"),
                version=f"v-{doc_id}",
                slug=slugs.get(doc_id),
            )
            for doc_id in doc_ids
        ]
        return DocumentCatalog(documents)

    return factory


@pytest.fixture
def docs_dir(tmp_path: Path) -> Path:
    """Create docs directory with sample structure."""
    docs = tmp_path / "docs"
    docs.mkdir()
    (docs / "intro.md").write_text("# Introduction\n\nWelcome.")

    guides = docs / "guides"
    guides.mkdir()
    (guides / "index.md").write_text("# Guides\n\nAll guides.")
    (guides / "a.md").write_text("# Guide A\n\nFirst guide.")
    (guides / "b.md").write_text("---\nsidebar_label: Second\n---\n# Guide B\n\nSecond guide.")

    (docs / "hidden-page.md").write_text("# Hidden Page\n\nNot in the sidebar.")
    (docs / "_partial.md").write_text("# Partial")
    return docs


@pytest.fixture
def sidebar_file(tmp_path: Path) -> Path:
    """Create sidebar declaration matching docs_dir."""
    path = tmp_path / "sidebars.json"
    path.write_text(
        json.dumps(
            {
                "docsSidebar": [
                    "intro",
                    {
                        "type": "category",
                        "label": "Guides",
                        "collapsed": False,
                        "link": {"type": "doc", "id": "guides/index"},
                        "items": ["guides/a", "guides/b"],
                    },
                    {
                        "type": "category",
                        "label": "Resources",
                        "items": [
                            {"type": "link", "label": "llms.txt", "href": "/llms.txt"},
                            {
                                "type": "link",
                                "label": "GitHub",
                                "href": "https://github.com/example/docs",
                            },
                        ],
                    },
                ]
            }
        )
    )
    return path


@pytest.fixture
def test_config(tmp_path: Path, docs_dir: Path, sidebar_file: Path) -> Config:
    """Create a test configuration with tmp_path directories."""
    return Config(
        site=SiteConfig(title="Example Docs", tagline="Docs for tests", url="https://docs.example.com"),
        server=ServerConfig(),
        docs=DocsConfig(
            source_dir=docs_dir,
            sidebar_file=sidebar_file,
            build_dir=tmp_path / ".docroute",
        ),
        resources=ResourcesConfig(),
        live_reload=LiveReloadConfig(enabled=False),
    )
