"""Display values for the customer screen.

The customer list and the stats card come from two independent calls
with no atomicity between them, so the numbers here are never expected
to agree with each other.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional, Sequence

from tailor_billing.core.money import ZERO
from tailor_billing.core.types import Customer, CustomerStats

VISIBLE_REVENUE_LABEL = "Revenue (loaded customers)"


@dataclass(frozen=True)
class CustomerOverview:
    customers: List[Customer] = field(default_factory=list)
    total_customers: int = 0
    customers_with_outstanding: int = 0
    total_outstanding_amount: Decimal = ZERO
    visible_revenue: Decimal = ZERO
    visible_revenue_label: str = VISIBLE_REVENUE_LABEL


def derive_visible_revenue(customers: Sequence[Customer]) -> Decimal:
    """Total spent by the customers currently loaded, not a shop-wide figure."""
    return sum((c.total_spent for c in customers), ZERO)


def filter_customers(customers: Sequence[Customer], term: Optional[str]) -> List[Customer]:
    needle = (term or "").strip().lower()
    if not needle:
        return list(customers)

    return [
        c for c in customers
        if needle in c.name.lower() or needle in (c.phone or "").lower()
    ]


def reconcile(
    customers: Optional[Sequence[Customer]],
    stats: Optional[CustomerStats],
    search_term: Optional[str] = None,
) -> CustomerOverview:
    # Either call may not have resolved yet
    customers = list(customers or [])
    stats = stats or CustomerStats()

    return CustomerOverview(
        customers=filter_customers(customers, search_term),
        total_customers=stats.total_customers,
        customers_with_outstanding=stats.customers_with_outstanding,
        total_outstanding_amount=stats.total_outstanding_amount,
        visible_revenue=derive_visible_revenue(customers),
    )
