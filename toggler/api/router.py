"""Router that accepts paths with and without a trailing slash."""

from typing import Any, Callable

from fastapi import APIRouter
from fastapi.types import DecoratedCallable


class TrailingSlashRouter(APIRouter):
    """APIRouter registering every route both with and without a trailing slash.

    Only the canonical form is included in the OpenAPI schema.
    """

    def api_route(
        self, path: str, *, include_in_schema: bool = True, **kwargs: Any
    ) -> Callable[[DecoratedCallable], DecoratedCallable]:
        """Register the route under both path forms."""
        if path == "/":
            # Collection roots rely on Starlette's slash redirect
            return super().api_route(path, include_in_schema=include_in_schema, **kwargs)
        if path.endswith("/"):
            alternate_path = path[:-1]
        else:
            alternate_path = path + "/"

        add_path = super().api_route(path, include_in_schema=include_in_schema, **kwargs)
        add_alternate_path = super().api_route(alternate_path, include_in_schema=False, **kwargs)

        def decorator(func: DecoratedCallable) -> DecoratedCallable:
            # Canonical path first so url_for resolves to it
            add_path(func)
            add_alternate_path(func)
            return func

        return decorator
