"""Ledger rules

Pure functions behind payment allocation, balance classification and
invoice status. No I/O; use cases feed them repository rows.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import List, Optional, Sequence, Tuple
from src.domain.invoice import InvoiceStatus
from src.domain.ledger_entry import LedgerEntry, ChargeCategory
from src.domain.money import ZERO, SETTLED_TOLERANCE


class BalanceStatus(str, Enum):
    SETTLED = "Settled"
    IN_DEBT = "In Debt"
    IN_CREDIT = "In Credit"


class AllocationConflict(Exception):
    """A charge no longer has the remaining amount the allocation planned for"""


def allocation_sort_key(categories: Sequence[str]):
    """
    Sort key placing charges in category order, then oldest first

    Charges of categories outside ``categories`` sort last.
    """
    rank = {category: index for index, category in enumerate(categories)}

    def key(charge: LedgerEntry):
        return (
            rank.get(charge.category, len(rank)),
            charge.due_date or date.max,
            charge.entry_date or date.max,
            charge.id,
        )

    return key


def plan_allocations(
    amount: Decimal,
    charges: Sequence[LedgerEntry],
    categories: Sequence[str] = ChargeCategory.ALLOCATION_ORDER,
) -> List[Tuple[LedgerEntry, Decimal]]:
    """
    Distribute ``amount`` across charges, oldest debt first

    Each charge receives at most its remaining_amount and the total never
    exceeds ``amount``.

    Args:
        amount: Unallocated payment amount
        charges: Open charges (any order)
        categories: Category priority

    Returns:
        (charge, amount_to_apply) pairs with positive amounts
    """
    left = amount
    plan: List[Tuple[LedgerEntry, Decimal]] = []

    for charge in sorted(charges, key=allocation_sort_key(categories)):
        if left <= ZERO:
            break
        if charge.remaining_amount <= ZERO:
            continue

        applied = min(left, charge.remaining_amount)
        plan.append((charge, applied))
        left -= applied

    return plan


def classify_balance(net: Decimal) -> Tuple[Decimal, BalanceStatus]:
    """
    Classify a net balance (debt minus credit)

    Returns:
        (display balance, status); display is never negative
    """
    if abs(net) < SETTLED_TOLERANCE:
        return ZERO, BalanceStatus.SETTLED
    if net > 0:
        return net, BalanceStatus.IN_DEBT
    return abs(net), BalanceStatus.IN_CREDIT


def compute_invoice_status(
    total_amount: Decimal,
    paid_amount: Decimal,
    due_date: Optional[date],
    today: date,
) -> InvoiceStatus:
    if total_amount > 0 and paid_amount >= total_amount:
        return InvoiceStatus.PAID
    if paid_amount > 0:
        return InvoiceStatus.PARTIAL
    if due_date is not None and due_date < today:
        return InvoiceStatus.OVERDUE
    return InvoiceStatus.PENDING
