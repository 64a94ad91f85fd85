"""Site build pipeline.

Build output structure:
    .docroute/
    ├── .gitignore
    ├── routes.json        # Compiled route table
    └── navigation.json    # Navigation trees keyed by sidebar id

A build either produces a complete BuildResult or raises; nothing is written
or published from a failed build.
"""

import json
import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path

from docroute.config import Config
from docroute.core.documents import DocumentCatalog, DocumentLoader
from docroute.core.navigation import NavigationTree, project_navigation
from docroute.core.nodes import Sidebar, load_sidebar_file, parse_sidebars
from docroute.core.resources import reserved_resources
from docroute.core.routes import RouteEntry, RouteTable, compile_routes

logger = logging.getLogger(__name__)

_GITIGNORE_CONTENT = "# Ignore everything in this directory\n*\n"


@dataclass(frozen=True)
class BuildResult:
    """Route table and navigation produced by one build."""

    config: Config
    documents: DocumentCatalog
    sidebars: tuple[Sidebar, ...]
    routes: RouteTable
    navigation: dict[str, NavigationTree]

    def navigation_for(self, entry: RouteEntry) -> NavigationTree | None:
        """Navigation tree of the sidebar owning a route, if any."""
        if entry.sidebar_id is None:
            return None
        return self.navigation.get(entry.sidebar_id)


def build_site(config: Config) -> BuildResult:
    """Run a full build.

    Args:
        config: Application configuration

    Returns:
        BuildResult with route table and navigation trees

    Raises:
        FileNotFoundError: If the sidebar file doesn't exist
        BuildError: If declarations are invalid or routes collide
    """
    documents = DocumentLoader(config.docs.source_dir).load()
    raw_sidebars = load_sidebar_file(config.docs.sidebar_file)
    sidebars = tuple(parse_sidebars(raw_sidebars, documents))

    routes = compile_routes(
        sidebars,
        documents,
        route_base_path=config.docs.route_base_path,
        resources=reserved_resources(
            documents,
            llms_txt=config.resources.llms_txt,
            markdown_zip=config.resources.markdown_zip,
            llms_context=_llms_context(config, raw_sidebars),
        ),
    )
    navigation = project_navigation(sidebars, routes)

    logger.info(
        "Built %d documents into %d routes across %d sidebars",
        len(documents),
        len(routes),
        len(sidebars),
    )
    return BuildResult(
        config=config,
        documents=documents,
        sidebars=sidebars,
        routes=routes,
        navigation=navigation,
    )


def _llms_context(config: Config, raw_sidebars: object) -> str:
    site = config.site
    return json.dumps(
        {
            "site": [site.title, site.tagline, site.site_url, config.docs.route_base_path],
            "sidebars": raw_sidebars,
        },
        default=str,
    )


def write_build_output(result: BuildResult, build_dir: Path) -> list[Path]:
    """Write routes.json and navigation.json.

    Each file is written to a temporary sibling and moved into place so that
    readers never observe a partially written file.

    Args:
        result: Successful build
        build_dir: Output directory

    Returns:
        Paths of the written files
    """
    if not build_dir.exists():
        build_dir.mkdir(parents=True, exist_ok=True)
        (build_dir / ".gitignore").write_text(_GITIGNORE_CONTENT, encoding="utf-8")

    routes_path = build_dir / "routes.json"
    navigation_path = build_dir / "navigation.json"

    _write_json_atomic(routes_path, result.routes.to_dict())
    _write_json_atomic(
        navigation_path,
        {sidebar_id: tree.to_dict() for sidebar_id, tree in result.navigation.items()},
    )
    return [routes_path, navigation_path]


def _write_json_atomic(path: Path, data: object) -> None:
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
            f.write("\n")
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


class SiteState:
    """Holds the live build behind a single reference.

    Request handlers read ``current``; a rebuild replaces it in one
    assignment, so readers see either the old or the new build, never a mix.
    """

    __slots__ = ("_current",)

    def __init__(self, initial: BuildResult) -> None:
        self._current = initial

    @property
    def current(self) -> BuildResult:
        return self._current

    def swap(self, result: BuildResult) -> BuildResult:
        """Publish a new build, returning the previous one."""
        previous = self._current
        self._current = result
        return previous

    def rebuild(self) -> BuildResult:
        """Rebuild from the current config and publish the result.

        The live build is replaced only if the rebuild succeeds.

        Raises:
            FileNotFoundError: If the sidebar file disappeared
            BuildError: If the new declarations are invalid
        """
        result = build_site(self._current.config)
        self.swap(result)
        return result
