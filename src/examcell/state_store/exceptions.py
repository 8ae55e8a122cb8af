"""Custom exceptions for State Store."""


class StateStoreError(Exception):
    """Base exception for State Store errors."""


class NotFoundError(StateStoreError):
    """Record with given ID does not exist."""


class UserNotFoundError(NotFoundError):
    """User with given ID or email does not exist."""


class StudentNotFoundError(NotFoundError):
    """Student with given ID does not exist."""


class TeacherNotFoundError(NotFoundError):
    """Teacher with given ID does not exist."""


class SubjectNotFoundError(NotFoundError):
    """Subject with given ID or code does not exist."""


class MarkNotFoundError(NotFoundError):
    """Mark with given ID does not exist."""


class QueryNotFoundError(NotFoundError):
    """Query with given ID does not exist."""


class BonafideNotFoundError(NotFoundError):
    """Bonafide request with given ID does not exist."""


class DuplicateError(StateStoreError):
    """A record with the same unique key already exists."""


class UserExistsError(DuplicateError):
    """User with given email already exists."""


class StudentExistsError(DuplicateError):
    """Student with given roll number already exists."""


class SubjectExistsError(DuplicateError):
    """Subject with given code already exists."""


class InvalidStateTransitionError(StateStoreError):
    """Requested status change is not allowed from the current status."""


class ValidationError(StateStoreError):
    """Input violates a domain rule."""
