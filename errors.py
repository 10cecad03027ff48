"""
Error taxonomy

Every failure the API reports on purpose is one of these. Each carries the
HTTP status it maps to; main.py turns them into JSON responses.
"""

from typing import List, Optional

from schemas import FieldError


class InventoryError(Exception):
    status_code = 500
    detail = "Internal server error"

    def __init__(self, detail: Optional[str] = None):
        if detail is not None:
            self.detail = detail
        super().__init__(self.detail)


class ValidationFailed(InventoryError):
    status_code = 400
    detail = "Validation failed"

    def __init__(self, errors: List[FieldError]):
        self.errors = errors
        super().__init__()


class InvalidIdentifier(InventoryError):
    status_code = 400

    def __init__(self, kind: str):
        self.kind = kind
        super().__init__(f"Invalid {kind} ID")


class NotFound(InventoryError):
    status_code = 404

    def __init__(self, kind: str):
        self.kind = kind
        super().__init__(f"{kind.capitalize()} not found")


class DuplicateEmail(InventoryError):
    status_code = 400
    detail = "Email already in use"


class InvalidCredentials(InventoryError):
    status_code = 401
    detail = "Invalid credentials"


class AuthenticationRequired(InventoryError):
    status_code = 401
    detail = "Authentication required"


class PermissionDenied(InventoryError):
    status_code = 403
    detail = "Permission denied"


class StoreUnavailable(InventoryError):
    status_code = 500
    detail = "Database not available"
