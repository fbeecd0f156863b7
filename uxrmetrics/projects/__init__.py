"""Project querying, filtering and persistence."""

from uxrmetrics.projects.filters import ProjectFilters, build_predicates, build_project_query

__all__ = ["ProjectFilters", "build_predicates", "build_project_query"]
