class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a referenced entity does not exist."""


class AuthorizationError(DomainError):
    """Raised when the caller lacks permission for an action."""


class StateTransitionError(DomainError):
    """Raised when an attendance event is not legal in the current state."""


class AlreadyClockedIn(StateTransitionError):
    pass


class AlreadyOnBreak(StateTransitionError):
    pass


class NotOnBreak(StateTransitionError):
    pass


class CannotClockOutWhileOnBreak(StateTransitionError):
    pass


class AlreadyClockedOut(StateTransitionError):
    pass


class PaymentError(DomainError):
    """Raised when a payment cannot be applied to a job sheet."""


class OverpaymentRejected(PaymentError):
    pass


class ConversionError(DomainError):
    """Raised when a quotation cannot be converted into a job sheet."""


class AlreadyConverted(ConversionError):
    pass


class SourceNotFound(ConversionError):
    pass


class PersistenceError(Exception):
    """Raised when the underlying document store operation fails."""


class DocumentNotFoundError(PersistenceError):
    pass


class ConcurrentModificationError(PersistenceError):
    """Raised when a compare-and-swap write finds a newer revision."""


class DocumentExistsError(PersistenceError):
    """Raised when a create names a document id that is already taken."""
