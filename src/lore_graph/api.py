"""Transport-facing facade.

Every operation returns ``(status, envelope)``. Domain errors become error
envelopes carrying their own status; anything else is logged and reported
as ``INTERNAL_SERVER_ERROR`` without leaking details.
"""

import logging
import threading
from concurrent.futures import Executor, ThreadPoolExecutor
from typing import Any, Callable

from .analytics.compare import CompareEngine
from .analytics.stats import StatsEngine
from .catalog import Catalog
from .config import Settings, get_settings
from .errors import LoreApiError, RouteNotFound
from .explore.builder import GraphBuilder
from .explore.paths import PathFinder
from .query.params import RawParams, get_param, parse_bool
from .query.resolver import QueryResolver
from .query.search import GlobalSearch
from .schema.registry import SchemaRegistry, get_registry
from .store import RowStore, build_store

logger = logging.getLogger(__name__)

Response = tuple[int, dict[str, Any]]

INTERNAL_ERROR = {
    "error": {
        "code": "INTERNAL_SERVER_ERROR",
        "message": "Internal server error",
        "details": [],
    }
}


class LoreApi:
    """Wires the registry, a row store and the query engines together."""

    def __init__(
        self,
        settings: Settings | None = None,
        registry: SchemaRegistry | None = None,
        store: RowStore | None = None,
        executor: Executor | None = None,
    ):
        self.settings = settings or get_settings()
        self.registry = registry or get_registry()
        self.store = store if store is not None else build_store(self.settings, self.registry)

        self._owned_executor = None
        if executor is None and self.settings.max_workers > 0:
            executor = self._owned_executor = ThreadPoolExecutor(
                max_workers=self.settings.max_workers,
                thread_name_prefix="lore-graph",
            )
        self.executor = executor

        args = (self.registry, self.store)
        self.resolver = QueryResolver(*args, self.settings, executor)
        self.global_search = GlobalSearch(*args, self.settings, executor)
        self.graph_builder = GraphBuilder(*args, self.settings, executor)
        self.path_finder = PathFinder(*args, self.settings, executor)
        self.compare_engine = CompareEngine(*args, self.settings, executor)
        self.stats_engine = StatsEngine(*args, executor)
        self.catalog = Catalog(*args, self.settings, executor)

    def close(self) -> None:
        if self._owned_executor is not None:
            self._owned_executor.shutdown(wait=True)
            self._owned_executor = None

    def __enter__(self) -> "LoreApi":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _call(self, operation: Callable[..., Any], *args: Any, **kwargs: Any) -> Response:
        try:
            result = operation(*args, **kwargs)
        except LoreApiError as e:
            logger.debug("%s failed: %s %s", operation.__name__, e.code, e.message)
            return e.status, e.to_envelope()
        except Exception:
            logger.exception("Unhandled error in %s", operation.__name__)
            return 500, INTERNAL_ERROR
        if hasattr(result, "to_envelope"):
            result = result.to_envelope()
        return 200, result

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    def list(self, resource: str, params: RawParams | None = None, base_path: str | None = None) -> Response:
        return self._call(self.resolver.resolve_list, resource, params or {}, base_path)

    def detail(self, resource: str, identifier: str, params: RawParams | None = None) -> Response:
        return self._call(self.resolver.resolve_detail, resource, identifier, params or {})

    def search(self, params: RawParams, base_path: str | None = None) -> Response:
        return self._call(self.global_search.search_all, params, base_path)

    def graph(self, params: RawParams, cancel: threading.Event | None = None) -> Response:
        return self._call(
            self.graph_builder.build_graph,
            get_param(params, "resource"),
            get_param(params, "identifier"),
            depth=params.get("depth"),
            limit_per_relation=params.get("limitPerRelation"),
            include_backlinks=parse_bool(params.get("backlinks"), self.settings.default_backlinks),
            resources=params.get("resources"),
            cancel=cancel,
        )

    def path(self, params: RawParams, cancel: threading.Event | None = None) -> Response:
        return self._call(
            self.path_finder.find_path,
            get_param(params, "fromResource"),
            get_param(params, "fromIdentifier"),
            get_param(params, "toResource"),
            get_param(params, "toIdentifier"),
            max_depth=params.get("maxDepth"),
            limit_per_relation=params.get("limitPerRelation"),
            include_backlinks=parse_bool(params.get("backlinks"), self.settings.default_backlinks),
            resources=params.get("resources"),
            cancel=cancel,
        )

    def compare(self, resource: str, params: RawParams) -> Response:
        return self._call(self.compare_engine.compare, resource, params)

    def stats(self, resource: str, group_key: str) -> Response:
        return self._call(self.stats_engine.stats_by_group, resource, group_key)

    def overview(self) -> Response:
        return self._call(self.catalog.overview)

    def catalog_list(self) -> Response:
        return self._call(self.catalog.resources)

    def resource_doc(self, name: str) -> Response:
        return self._call(self.catalog.resource, name)

    # -------------------------------------------------------------------------
    # Routing
    # -------------------------------------------------------------------------

    def get(self, path: str, params: RawParams | None = None) -> Response:
        """Dispatch a GET-style path (relative to the API base path).

        Recognised paths: ``overview``, ``resources[/<name>]``, ``search``,
        ``explore/graph``, ``explore/path``, ``compare/<resource>``,
        ``stats/<resource>/<group>``, ``<resource>`` and ``<resource>/<id>``.
        """
        params = params or {}
        base = self.settings.api_base_path.rstrip("/")
        if base and path.startswith(base):
            path = path[len(base):]
        parts = [part for part in path.strip("/").split("/") if part]

        if parts == ["overview"]:
            return self.overview()
        if parts == ["resources"]:
            return self.catalog_list()
        if len(parts) == 2 and parts[0] == "resources":
            return self.resource_doc(parts[1])
        if parts == ["search"]:
            return self.search(params)
        if parts == ["explore", "graph"]:
            return self.graph(params)
        if parts == ["explore", "path"]:
            return self.path(params)
        if len(parts) == 2 and parts[0] == "compare":
            return self.compare(parts[1], params)
        if len(parts) == 3 and parts[0] == "stats":
            return self.stats(parts[1], parts[2])
        if len(parts) == 1:
            return self.list(parts[0], params)
        if len(parts) == 2:
            return self.detail(parts[0], parts[1], params)

        error = RouteNotFound(path)
        return error.status, error.to_envelope()
