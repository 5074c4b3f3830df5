"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as a transaction already paired as a transfer."""


def account_not_found(account_id: int) -> str:
    """Return message for missing account."""
    return f"Account {account_id} not found"


def category_not_found(category_id: int) -> str:
    """Return message for missing category by ID."""
    return f"Category {category_id} not found"


def transaction_not_found(transaction_id: int) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def rule_not_found(rule_id: int) -> str:
    """Return message for missing category rule."""
    return f"Category rule {rule_id} not found"


def recurring_rule_not_found(rule_id: int) -> str:
    """Return message for missing recurring rule."""
    return f"Recurring rule {rule_id} not found"


def import_batch_not_found(batch_id: int) -> str:
    """Return message for missing import batch."""
    return f"Import batch {batch_id} not found"


def invalid_choice(field_name: str, value: object, choices) -> str:
    """Return message for a value outside an allowed set."""
    allowed = ", ".join(str(getattr(c, "value", c)) for c in choices)
    return f"Invalid {field_name} '{value}'. Expected one of: {allowed}"
