"""Utility for resolving account names to IDs."""

from finledger.domain.account import AccountService
from finledger.domain.errors import NotFoundError, account_not_found


def resolve_account(account_service: AccountService, account: str | int) -> int:
    """Resolve account name or ID to account ID.

    Numeric input is treated as an ID; anything else is matched against
    account names, exactly first and then case-insensitively.

    Raises:
        NotFoundError: If account is not found
    """
    if isinstance(account, int) or str(account).strip().isdigit():
        account_id = int(account)
        if account_service.get_account(account_id) is None:
            raise NotFoundError(account_not_found(account_id))
        return account_id

    accounts = account_service.list_accounts(include_inactive=True)
    for acc in accounts:
        if acc.name == account:
            return acc.id
    folded = account.casefold()
    for acc in accounts:
        if acc.name.casefold() == folded:
            return acc.id

    raise NotFoundError(f"Account '{account}' not found")
