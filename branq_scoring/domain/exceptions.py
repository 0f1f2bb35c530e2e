"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidTransactionDataError(DomainException):
    """Transaction record is malformed beyond per-field recovery"""

    pass


class FactorCalculationError(DomainException):
    """A factor calculator could not produce a score"""

    def __init__(self, factor: str, message: str):
        super().__init__(f"{factor}: {message}")
        self.factor = factor


class ProtocolRegistryError(DomainException):
    """Protocol registry configuration is missing or invalid"""

    pass
