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


class PermissionDeniedError(Exception):
    """Raised when a non-admin attempts an admin-only action."""

    def __init__(self, action: str):
        self.action = action
        super().__init__(f"Only administrators may {action}")


class InvalidOperationError(Exception):
    """Raised when an operation is not allowed in the entity's current state."""


class MalformedArchiveError(Exception):
    """Raised when a spreadsheet archive cannot yield its workbook or target sheet.

    Missing optional parts (drawings, media, relationship files) never raise;
    they only mean "no image" for the affected rows.
    """

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Malformed spreadsheet archive: {reason}")
