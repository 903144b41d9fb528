from enum import Enum


class PromptStatus(str, Enum):
    """Enum for prompt status."""
    ACTIVE = "ACTIVE"
    ARCHIVED = "ARCHIVED"


class VariableType(str, Enum):
    """Enum for template variable types."""
    STRING = "STRING"
    NUMBER = "NUMBER"
    BOOLEAN = "BOOLEAN"
    JSON = "JSON"


class ImportMode(str, Enum):
    """How an imported bundle is reconciled with existing prompts."""
    CREATE = "create"
    MERGE = "merge"


class DiffKind(str, Enum):
    EQUAL = "EQUAL"
    ADD = "ADD"
    DEL = "DEL"


class SortField(str, Enum):
    UPDATED_AT = "updatedAt"
    CREATED_AT = "createdAt"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"
