"""List, detail and search query resolution."""

from .params import QueryPlan, build_plan, split_csv
from .resolver import QueryResolver, build_links
from .search import GlobalSearch

__all__ = ["QueryPlan", "build_plan", "split_csv", "QueryResolver", "build_links", "GlobalSearch"]
