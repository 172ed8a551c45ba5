from .domain_repository import SQLAlchemyDomainRepository

__all__ = [
    "SQLAlchemyDomainRepository",
]
