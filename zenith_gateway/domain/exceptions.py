"""Domain-specific exceptions"""

from typing import List


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class ValidationError(DomainException):
    """Malformed or out-of-range input; carries every violation found"""

    def __init__(self, messages: List[str] | str):
        if isinstance(messages, str):
            messages = [messages]
        self.messages = list(messages)
        super().__init__(", ".join(self.messages))


class InvalidStateError(DomainException):
    """Operation attempted on a transaction in a terminal state"""

    pass


class OverpaymentError(DomainException):
    """Settlement would exceed the transaction total"""

    pass


class RoundingInvariantViolation(DomainException):
    """Allocated amounts do not add back up to the total after residual assignment"""

    pass
