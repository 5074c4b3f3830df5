"""Domain layer for finledger application.

Services are imported lazily: the database layer imports the entity and
error modules of this package, and the services import the database layer.
"""

_SERVICES = {
    "AccountService": "finledger.domain.account",
    "CategoryService": "finledger.domain.category",
    "CategoryRuleService": "finledger.domain.rules",
    "ImportService": "finledger.domain.csv_import",
    "RecurringRuleService": "finledger.domain.recurring",
    "SubscriptionService": "finledger.domain.subscriptions",
    "SummaryService": "finledger.domain.summary",
    "TransactionService": "finledger.domain.transaction",
    "TransferService": "finledger.domain.transfers",
}

__all__ = list(_SERVICES)


def __getattr__(name):
    if name in _SERVICES:
        from importlib import import_module

        return getattr(import_module(_SERVICES[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
