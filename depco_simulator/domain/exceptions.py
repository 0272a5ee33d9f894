"""Domain-specific exceptions"""

from typing import Optional


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class CreditItemValidationError(DomainException):
    """A credit item or account has a missing, non-numeric or out-of-range field"""

    def __init__(self, field: str, message: str, index: Optional[int] = None):
        self.field = field
        self.index = index
        self.message = message
        location = f"credit_items[{index}].{field}" if index is not None else field
        super().__init__(f"{location} {message}")

    def to_dict(self) -> dict:
        return {"field": self.field, "index": self.index, "message": str(self)}


class ScoreRangeError(DomainException):
    """Imported score lies outside the declared bureau range"""

    pass


class ScenarioNotFoundError(DomainException):
    """Referenced scenario does not exist"""

    pass


class UpstreamError(DomainException):
    """Lending API returned an error or is unavailable"""

    def __init__(self, operation: str, message: str, status_code: Optional[int] = None):
        self.operation = operation
        self.status_code = status_code
        super().__init__(f"{operation}: {message}")
