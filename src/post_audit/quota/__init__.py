"""Daily quota accounting against the provider's per-day limit."""

from .ledger import QuotaLedger, QuotaStatus

__all__ = [
    "QuotaLedger",
    "QuotaStatus",
]
