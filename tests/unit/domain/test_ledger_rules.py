"""Unit tests for ledger rules

Tests cover:
- Allocation order: category priority, then oldest charge first
- Allocation bounds: never more than the payment or any charge remaining
- Balance classification with the settled tolerance
- Invoice status derivation
- Money helpers
"""

from datetime import date
from decimal import Decimal

import pytest

from src.app.use_cases.billing.ledger_rules import (
    BalanceStatus,
    plan_allocations,
    classify_balance,
    compute_invoice_status,
)
from src.domain.invoice import InvoiceStatus
from src.domain.ledger_entry import LedgerEntry, EntryType, ChargeCategory
from src.domain.money import to_money, to_minor_units, from_minor_units


def _charge(id, category, remaining, due=None, entered=date(2024, 1, 1), amount=None):
    return LedgerEntry(
        id=id,
        customer_id="cust_1",
        type=EntryType.CHARGE,
        category=category,
        amount=amount if amount is not None else remaining,
        remaining_amount=remaining,
        due_date=due,
        entry_date=entered,
    )


class TestPlanAllocations:
    def test_settles_categories_in_priority_order(self):
        """
        Given: Fines, Rental and InitialFee charges
        When: A payment covers only part of them
        Then: InitialFee is settled first, then Rental, and Fines last
        """
        charges = [
            _charge("fine", ChargeCategory.FINES, Decimal("50.00")),
            _charge("rental", ChargeCategory.RENTAL, Decimal("100.00")),
            _charge("fee", ChargeCategory.INITIAL_FEE, Decimal("30.00")),
        ]

        plan = plan_allocations(Decimal("120.00"), charges)

        assert [(c.id, amt) for c, amt in plan] == [
            ("fee", Decimal("30.00")),
            ("rental", Decimal("90.00")),
        ]

    def test_oldest_due_date_first_within_category(self):
        charges = [
            _charge("later", ChargeCategory.RENTAL, Decimal("100.00"), due=date(2024, 3, 1)),
            _charge("earlier", ChargeCategory.RENTAL, Decimal("100.00"), due=date(2024, 2, 1)),
        ]

        plan = plan_allocations(Decimal("150.00"), charges)

        assert [(c.id, amt) for c, amt in plan] == [
            ("earlier", Decimal("100.00")),
            ("later", Decimal("50.00")),
        ]

    def test_never_exceeds_payment_or_charge_remaining(self):
        charges = [
            _charge("a", ChargeCategory.RENTAL, Decimal("40.00"), amount=Decimal("100.00")),
            _charge("b", ChargeCategory.RENTAL, Decimal("25.50"), due=date(2024, 5, 1)),
            _charge("c", ChargeCategory.OTHER, Decimal("10.00")),
        ]

        plan = plan_allocations(Decimal("60.00"), charges)

        assert sum(amt for _, amt in plan) == Decimal("60.00")
        for charge, amt in plan:
            assert Decimal("0") < amt <= charge.remaining_amount

    def test_overpayment_leaves_remainder_unallocated(self):
        charges = [_charge("a", ChargeCategory.RENTAL, Decimal("40.00"))]

        plan = plan_allocations(Decimal("100.00"), charges)

        assert sum(amt for _, amt in plan) == Decimal("40.00")

    def test_skips_settled_charges(self):
        charges = [
            _charge("settled", ChargeCategory.INITIAL_FEE, Decimal("0.00"), amount=Decimal("30.00")),
            _charge("open", ChargeCategory.RENTAL, Decimal("20.00")),
        ]

        plan = plan_allocations(Decimal("20.00"), charges)

        assert [c.id for c, _ in plan] == ["open"]

    def test_custom_category_order(self):
        charges = [
            _charge("rental", ChargeCategory.RENTAL, Decimal("100.00")),
            _charge("fine", ChargeCategory.FINES, Decimal("50.00")),
        ]

        plan = plan_allocations(Decimal("50.00"), charges, [ChargeCategory.FINES, ChargeCategory.RENTAL])

        assert [(c.id, amt) for c, amt in plan] == [("fine", Decimal("50.00"))]

    def test_zero_payment_allocates_nothing(self):
        charges = [_charge("a", ChargeCategory.RENTAL, Decimal("40.00"))]

        assert plan_allocations(Decimal("0.00"), charges) == []


class TestClassifyBalance:
    def test_within_tolerance_is_settled(self):
        assert classify_balance(Decimal("0.004")) == (Decimal("0.00"), BalanceStatus.SETTLED)
        assert classify_balance(Decimal("-0.009")) == (Decimal("0.00"), BalanceStatus.SETTLED)

    def test_positive_net_is_debt(self):
        assert classify_balance(Decimal("120.00")) == (Decimal("120.00"), BalanceStatus.IN_DEBT)

    def test_negative_net_is_credit_with_positive_display(self):
        balance, status = classify_balance(Decimal("-35.00"))

        assert balance == Decimal("35.00")
        assert status == BalanceStatus.IN_CREDIT

    @pytest.mark.parametrize(
        "net, expected_display, expected_status",
        [
            (Decimal("0.005"), Decimal("0.00"), BalanceStatus.SETTLED),
            (Decimal("0.02"), Decimal("0.02"), BalanceStatus.IN_DEBT),
            (Decimal("-0.02"), Decimal("0.02"), BalanceStatus.IN_CREDIT),
        ],
    )
    def test_cent_boundaries(self, net, expected_display, expected_status):
        assert classify_balance(net) == (expected_display, expected_status)

class TestComputeInvoiceStatus:
    today = date(2024, 3, 10)

    def test_paid_in_full(self):
        assert compute_invoice_status(Decimal("100"), Decimal("100"), None, self.today) == InvoiceStatus.PAID

    def test_partially_paid_even_when_past_due(self):
        status = compute_invoice_status(Decimal("100"), Decimal("10"), date(2024, 1, 1), self.today)
        assert status == InvoiceStatus.PARTIAL

    def test_unpaid_past_due_is_overdue(self):
        status = compute_invoice_status(Decimal("100"), Decimal("0"), date(2024, 3, 9), self.today)
        assert status == InvoiceStatus.OVERDUE

    def test_unpaid_not_yet_due_is_pending(self):
        status = compute_invoice_status(Decimal("100"), Decimal("0"), date(2024, 3, 10), self.today)
        assert status == InvoiceStatus.PENDING


class TestMoney:
    def test_to_money_rounds_half_up(self):
        assert to_money(Decimal("10.005")) == Decimal("10.01")
        assert to_money(None) == Decimal("0.00")
        assert to_money(3) == Decimal("3.00")

    def test_minor_units(self):
        assert to_minor_units(Decimal("120.50")) == 12050
        assert from_minor_units(12050) == Decimal("120.50")
