from .base import Base
from .session import engine, async_session_factory, create_tables, get_db_session, session_scope
from .models import DomainModel, GlueRecordModel, DomainMetadataModel

__all__ = [
    "Base",
    "engine",
    "async_session_factory",
    "create_tables",
    "get_db_session",
    "session_scope",
    "DomainModel",
    "GlueRecordModel",
    "DomainMetadataModel",
]
