"""Error taxonomy shared by every query operation.

Each error carries the HTTP-style status, a stable machine code and a list
of detail dicts. Transports render them with :meth:`LoreApiError.to_envelope`.
"""

from typing import Any


class LoreApiError(Exception):
    """Base class for errors reported to callers as an error envelope."""

    status: int = 500
    code: str = "INTERNAL_SERVER_ERROR"

    def __init__(self, message: str, details: list[dict[str, Any]] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or []

    def to_envelope(self) -> dict[str, Any]:
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
            }
        }


class UnknownResource(LoreApiError):
    status = 404
    code = "RESOURCE_NOT_FOUND"

    def __init__(self, resource: str, suggestions: list[str] | None = None):
        details: list[dict[str, Any]] = [{"resource": resource}]
        if suggestions:
            details[0]["suggestions"] = suggestions
        super().__init__(f'Unknown resource "{resource}"', details)
        self.resource = resource


class EntityNotFound(LoreApiError):
    status = 404
    code = "ENTITY_NOT_FOUND"

    def __init__(self, resource: str, identifier: str):
        super().__init__(
            f'Resource "{resource}" entry "{identifier}" was not found',
            [{"resource": resource, "identifier": identifier}],
        )
        self.resource = resource
        self.identifier = identifier


class RouteNotFound(LoreApiError):
    status = 404
    code = "ROUTE_NOT_FOUND"

    def __init__(self, path: str):
        super().__init__(f'No route for "{path}"', [{"path": path}])
        self.path = path


class ValidationError(LoreApiError):
    status = 400
    code = "VALIDATION_ERROR"


class InvalidSort(ValidationError):
    code = "INVALID_SORT"

    def __init__(self, resource: str, field: str):
        super().__init__(
            f'Unknown sort field "{field}" for resource "{resource}"',
            [{"resource": resource, "sort": field}],
        )


class InvalidFilter(ValidationError):
    code = "INVALID_FILTER"

    def __init__(self, resource: str, key: str):
        super().__init__(
            f'Unknown filter "{key}" for resource "{resource}"',
            [{"resource": resource, "filter": key}],
        )


class InvalidInclude(ValidationError):
    code = "INVALID_INCLUDE"

    def __init__(self, resource: str, key: str):
        super().__init__(
            f'Unknown include "{key}" for resource "{resource}"',
            [{"resource": resource, "include": key}],
        )


class CompareRequiresTwoItems(LoreApiError):
    status = 400
    code = "COMPARE_REQUIRES_TWO_ITEMS"

    def __init__(self, resource: str, resolved: int):
        super().__init__(
            f'Compare for "{resource}" needs at least two existing entries, got {resolved}',
            [{"resource": resource, "resolved": resolved}],
        )


class CompareNotSupported(LoreApiError):
    status = 400
    code = "COMPARE_NOT_SUPPORTED"

    def __init__(self, resource: str):
        super().__init__(
            f'Resource "{resource}" does not support compare',
            [{"resource": resource}],
        )


class StatsNotFound(LoreApiError):
    status = 404
    code = "STATS_NOT_FOUND"

    def __init__(self, resource: str, group_key: str):
        super().__init__(
            f'No stats "{group_key}" for resource "{resource}"',
            [{"resource": resource, "groupKey": group_key}],
        )


class TraversalCancelled(LoreApiError):
    status = 499
    code = "REQUEST_CANCELLED"

    def __init__(self) -> None:
        super().__init__("Traversal cancelled by caller")


class StoreError(LoreApiError):
    """The row store failed. Carries no entity payload."""

    status = 500
    code = "STORE_ERROR"

    def __init__(self, message: str = "Row store request failed"):
        super().__init__(message)
