"""SQLAlchemy adapter package for eventkb."""

from __future__ import annotations

from .mappings import create_all_tables, mapper_registry, start_mappers
from .repositories import SqlAlchemyEntityRepository, SqlAlchemyEventRepository
from .unit_of_work import (
    SqlAlchemyKnowledgeUnitOfWork,
    StartupError,
    is_started,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyEntityRepository",
    "SqlAlchemyEventRepository",
    "SqlAlchemyKnowledgeUnitOfWork",
    "StartupError",
    "create_all_tables",
    "is_started",
    "mapper_registry",
    "shutdown",
    "start_mappers",
    "startup",
]
