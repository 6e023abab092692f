"""
Error taxonomy for the catering booking engine.

The validator and price calculator report business-rule violations in
their result objects; these exceptions are raised by the operations that
write (booking creation, status changes, coupon redemption) and for
programmer errors such as a malformed definition.
"""


class CateringError(Exception):
    """Base exception for booking engine errors"""
    pass


class ValidationError(CateringError):
    """Raised when a request violates structural or business constraints.

    ``errors`` always holds every violated rule, not just the first one.
    """

    def __init__(self, errors, message=None):
        if isinstance(errors, str):
            errors = [errors]
        self.errors = list(errors)
        super().__init__(message or (self.errors[0] if self.errors else "Validation failed"))


class StateTransitionError(ValidationError):
    """Raised when a status or payment status change is not permitted"""

    def __init__(self, field, current, requested):
        self.field = field
        self.current = current
        self.requested = requested
        super().__init__([f"Cannot change {field} from '{current}' to '{requested}'"])


class NotFoundError(CateringError):
    """Raised when a definition, coupon or booking does not exist"""
    pass


class ReferenceExhausted(CateringError):
    """Raised when no unique booking reference could be generated"""
    pass


class ConflictError(CateringError):
    """Raised when a coupon redemption loses the race for its last use"""
    pass


class DefinitionError(CateringError):
    """Raised for malformed definitions or selections priced without validation"""
    pass
