from .domain_repository import DomainRepository
from .registrar_client import RegistrarClient

__all__ = [
    "DomainRepository",
    "RegistrarClient",
]
