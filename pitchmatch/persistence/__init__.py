"""Persistence layer for contacts, leads, templates, campaigns and the send queue.

Public API:
    # Database initialization and session management
    - init_database(database_url: str) -> None
    - get_session() -> ContextManager[Session]
    - close_database() -> None
    - get_engine() -> Engine

    # Repository classes
    - ContactRepository, OpportunityRepository, TemplateRepository
    - PoolRepository, CampaignRepository
    - EmailQueueRepository, EmailLogRepository

    # Exceptions
    - PersistenceError: Base exception for all persistence errors
    - DatabaseConnectionError: Database connection/initialization failures
    - RecordNotFoundError: Required record not found
    - DataIntegrityError: Constraint violations

Example usage:
    >>> from pitchmatch.persistence import init_database, get_session, ContactRepository
    >>>
    >>> init_database("sqlite:///./data/pitchmatch.db")
    >>>
    >>> with get_session() as session:
    ...     contacts = ContactRepository(session).list_for_user("user-1")
"""

from .database import close_database, get_engine, get_session, init_database
from .exceptions import (
    DatabaseConnectionError,
    DataIntegrityError,
    PersistenceError,
    RecordNotFoundError,
)
from .repositories import (
    CampaignRepository,
    ContactRepository,
    EmailLogRepository,
    EmailQueueRepository,
    OpportunityRepository,
    PoolRepository,
    TemplateRepository,
)

__all__ = [
    "init_database",
    "get_session",
    "close_database",
    "get_engine",
    "ContactRepository",
    "OpportunityRepository",
    "TemplateRepository",
    "PoolRepository",
    "CampaignRepository",
    "EmailQueueRepository",
    "EmailLogRepository",
    "PersistenceError",
    "DatabaseConnectionError",
    "RecordNotFoundError",
    "DataIntegrityError",
]
