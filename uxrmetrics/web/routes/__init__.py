"""UXR Metrics web route modules.

Each module exports a ``router`` (APIRouter instance) that
``uxrmetrics.web.app.create_app`` includes.

Usage:
    from uxrmetrics.web.routes import projects
    app.include_router(projects.router)
"""

from uxrmetrics.web.routes import (
    analytics,
    auth,
    export,
    health,
    integrations,
    projects,
    taxonomy,
    tokens,
    uploads,
)

__all__ = [
    "analytics",
    "auth",
    "export",
    "health",
    "integrations",
    "projects",
    "taxonomy",
    "tokens",
    "uploads",
]
