"""Domain-specific exceptions — framework-independent."""


class EntityNotFoundError(Exception):
    """Raised when a requested entity does not exist."""

    def __init__(self, entity_type: str, entity_id: int | str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} with id '{entity_id}' not found")


class DuplicateEntityError(Exception):
    """Raised when attempting to create a duplicate entity."""

    def __init__(self, entity_type: str, field: str, value: str):
        self.entity_type = entity_type
        self.field = field
        self.value = value
        super().__init__(f"{entity_type} with {field}='{value}' already exists")


class DomainValidationError(ValueError):
    """Raised when an operator request is rejected before reaching the registrar."""


class RegistrarError(Exception):
    """Raised when the registrar API fails or rejects a command.

    ``status_code`` is the HTTP status when the failure happened at the
    transport level, ``None`` when the registrar answered with an ERR_ status.
    """

    def __init__(self, command: str, message: str, status_code: int | None = None):
        self.command = command
        self.message = message
        self.status_code = status_code
        super().__init__(f"Synergy Wholesale API error [{command}]: {message}")


class RegistrarConfigurationError(RuntimeError):
    """Raised when registrar credentials are missing."""
