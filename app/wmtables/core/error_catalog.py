from dataclasses import dataclass
from fastapi import status


@dataclass(frozen=True)
class ErrorDefinition:
    code: str
    message: str
    status_code: int


class ErrorCatalog:
    VALIDATION_ERROR = ErrorDefinition(
        "VALIDATION_ERROR",
        "Validation error",
        status.HTTP_422_UNPROCESSABLE_ENTITY,
    )
    TABLE_ROWS_LIMIT_EXCEEDED = ErrorDefinition(
        "TABLE_ROWS_LIMIT_EXCEEDED",
        "Too many rows for a single table request",
        status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
    )
    TABLE_UNKNOWN_ACTION = ErrorDefinition(
        "TABLE_UNKNOWN_ACTION",
        "Unknown table action",
        status.HTTP_400_BAD_REQUEST,
    )
    EXPORT_ROWS_LIMIT_EXCEEDED = ErrorDefinition(
        "EXPORT_ROWS_LIMIT_EXCEEDED",
        "Too many rows to export",
        status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
    )
    INTERNAL_ERROR = ErrorDefinition(
        "INTERNAL_ERROR",
        "Internal server error",
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


class AppError(Exception):
    def __init__(self, error: ErrorDefinition, details: object | None = None):
        self.error = error
        self.details = details
        super().__init__(error.message)
