"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidAmountError(DomainException):
    """Price, quantity, debt or rate is negative, non-finite or non-numeric"""

    def __init__(self, field: str, value: object, reason: str):
        super().__init__(f"Invalid {field}: {value!r} ({reason})")
        self.field = field
        self.value = value
        self.reason = reason


class AmountOverflowError(DomainException):
    """Amount exceeds the largest integer subunit value we can exchange safely"""

    pass


class ProcessorError(DomainException):
    """Payment processor rejected the call or is unavailable"""

    def __init__(self, message: str, operation: str = "unknown"):
        super().__init__(message)
        self.operation = operation


class PaymentDeclinedError(ProcessorError):
    """Card was declined by the issuer"""

    def __init__(self, message: str, operation: str = "unknown", decline_code: str | None = None):
        super().__init__(message, operation)
        self.decline_code = decline_code


class ProcessorNotConfiguredError(ProcessorError):
    """No processor API key available"""

    pass
