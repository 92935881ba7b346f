"""Domain-specific exceptions"""

from typing import Dict


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class FieldValidationError(DomainException):
    """One or more input fields failed validation; nothing was persisted"""

    def __init__(self, errors: Dict[str, str]):
        self.errors = dict(errors)
        fields = ", ".join(sorted(self.errors))
        super().__init__(f"Validation failed for: {fields}")


class InvalidTransitionError(DomainException):
    """Requested status change is not allowed from the current status"""

    def __init__(self, entity: str, current: str, requested: str):
        self.entity = entity
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot move {entity} from '{current}' to '{requested}'")


class StaleStateError(DomainException):
    """Record changed status between read and conditional write; re-fetch and retry"""

    def __init__(self, entity: str, record_id: str, expected: str):
        self.entity = entity
        self.record_id = record_id
        self.expected = expected
        super().__init__(f"{entity} {record_id} is no longer '{expected}'")


class RecordNotFoundError(DomainException):
    """No record with the given id"""

    def __init__(self, entity: str, record_id: str):
        self.entity = entity
        self.record_id = record_id
        super().__init__(f"{entity} {record_id} not found")


class DuplicateRegistrationError(DomainException):
    """User already holds a pending or approved registration"""

    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(f"User {user_id} already has an active bank agent registration")
