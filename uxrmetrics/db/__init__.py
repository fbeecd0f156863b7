"""Database layer for UXR Metrics with async SQLAlchemy."""

from uxrmetrics.db.connection import get_db, get_session, init_db
from uxrmetrics.db.models import (
    ApiTokenModel,
    Base,
    CategoryModel,
    ProjectFileModel,
    ProjectMetricModel,
    ProjectModel,
    ProjectTagModel,
    TagModel,
    UserModel,
)

__all__ = [
    "Base",
    "UserModel",
    "CategoryModel",
    "TagModel",
    "ProjectModel",
    "ProjectTagModel",
    "ProjectFileModel",
    "ProjectMetricModel",
    "ApiTokenModel",
    "get_db",
    "get_session",
    "init_db",
]
