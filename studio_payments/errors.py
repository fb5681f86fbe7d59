class PaymentError(Exception):
    """Base for failures surfaced to the caller as a 400 response."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(PaymentError):
    """A required request field is missing or invalid."""


class ProcessorError(PaymentError):
    """The Stripe call failed."""


class ProcessingError(ProcessorError):
    """Stripe answered, but the intent is not in the expected state."""


class StorageError(PaymentError):
    """A read or write against the payments store failed."""
