"""
Cash Flow Error Taxonomy

Every failure that leaves the ledger facade is one of these.
Callers can branch on the type:

- ValidationError: fix the input and try again
- NotFoundError: the referenced entry does not exist
- BalanceNotInitializedError: route the user to initial balance setup
- StorageError: the backend failed, show "try again"
"""

from typing import Optional


class CashFlowError(Exception):
    """Base exception for all cash flow ledger errors."""
    pass


class ValidationError(CashFlowError):
    """Caller-supplied data violates a field rule."""

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Validation error for {field}: {reason}")


class NotFoundError(CashFlowError):
    """Referenced entity does not exist in storage."""

    def __init__(self, resource: str, entity_id: str):
        self.resource = resource
        self.entity_id = entity_id
        super().__init__(f"{resource} with id '{entity_id}' not found")


class BalanceNotInitializedError(CashFlowError):
    """
    No balance record exists yet.

    This is NOT a generic failure. The UI uses it to send
    first-time users to the initial balance setup flow.
    """

    def __init__(self):
        super().__init__(
            "Cash flow balance has not been initialized. "
            "Please set an initial balance."
        )


class StorageError(CashFlowError):
    """Unexpected failure from the persistence backend."""

    def __init__(self, operation: str, original: Optional[BaseException] = None):
        self.operation = operation
        self.original = original
        detail = str(original) if original is not None else "unknown error"
        super().__init__(f"Storage operation '{operation}' failed: {detail}")
