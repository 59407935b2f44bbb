"""Installment policy

Pure decisions taken at booking time (eligibility, count, split, schedule)
and after a failed charge (retry spacing, delinquency).
"""

import math
from datetime import date, timedelta
from decimal import Decimal
from typing import List, Optional, Tuple
from dateutil.relativedelta import relativedelta
from src.domain.installment import (
    InstallmentConfig,
    InstallmentStatus,
    PlanType,
    SplitBasis,
)
from src.domain.money import ZERO, to_money
from .dtos import PriceBreakdownDTO

CADENCE_UNIT_DAYS = {
    PlanType.WEEKLY: 7,
    PlanType.MONTHLY: 30,
}


def default_config() -> InstallmentConfig:
    """Policy used for tenants that never configured one"""
    return InstallmentConfig(
        min_days_for_weekly=7,
        min_days_for_monthly=30,
        max_installments_weekly=4,
        max_installments_monthly=6,
    )


def meets_threshold(plan_type: PlanType, rental_days: int, config: InstallmentConfig) -> bool:
    if plan_type == PlanType.WEEKLY:
        return rental_days >= config.min_days_for_weekly
    if plan_type == PlanType.MONTHLY:
        return rental_days >= config.min_days_for_monthly
    return True


def eligible_plan_type(rental_days: int, config: InstallmentConfig) -> Optional[PlanType]:
    """
    Cadence for a rental of ``rental_days``

    Monthly takes precedence when both thresholds are met. None means the
    rental is paid in full.
    """
    if not config.enabled:
        return None
    if meets_threshold(PlanType.MONTHLY, rental_days, config):
        return PlanType.MONTHLY
    if meets_threshold(PlanType.WEEKLY, rental_days, config):
        return PlanType.WEEKLY
    return None


def is_eligible_for_installments(rental_days: int, config: InstallmentConfig) -> bool:
    return eligible_plan_type(rental_days, config) is not None


def installment_count(plan_type: PlanType, rental_days: int, config: InstallmentConfig) -> int:
    """min(ceil(days / cadence unit), cadence cap); full payment is one installment"""
    if plan_type == PlanType.FULL:
        return 1

    cap = (
        config.max_installments_weekly
        if plan_type == PlanType.WEEKLY
        else config.max_installments_monthly
    )
    return min(math.ceil(rental_days / CADENCE_UNIT_DAYS[plan_type]), cap)


def split_basis(basis: SplitBasis, breakdown: PriceBreakdownDTO) -> Tuple[Decimal, Decimal]:
    """
    Divide a booking price into (installable, upfront)

    The security deposit and one-time fees are always upfront. Components
    the basis does not cover are added to the upfront amount.
    """
    installable = breakdown.rental_fee
    upfront = (
        breakdown.security_deposit
        + breakdown.service_fee
        + breakdown.delivery_fee
        + breakdown.collection_fee
        + breakdown.insurance_premium
    )

    if basis in (SplitBasis.RENTAL_TAX, SplitBasis.RENTAL_TAX_EXTRAS):
        installable += breakdown.tax_amount
    else:
        upfront += breakdown.tax_amount

    if basis == SplitBasis.RENTAL_TAX_EXTRAS:
        installable += breakdown.extras_total
    else:
        upfront += breakdown.extras_total

    return to_money(installable), to_money(upfront)


def split_amounts(total: Decimal, count: int) -> List[Decimal]:
    """
    Split ``total`` into ``count`` cent amounts

    Every installment is round(total / count, 2) except the last, which
    absorbs the rounding remainder so the sum is exact.
    """
    if count < 1:
        raise ValueError("count must be >= 1")

    total = to_money(total)
    base = to_money(total / count)
    amounts = [base] * (count - 1)
    amounts.append(total - base * (count - 1))
    return amounts


def due_dates(
    plan_type: PlanType,
    count: int,
    start_date: date,
    booking_date: date,
    charge_first_upfront: bool,
) -> List[date]:
    """
    Due date of each installment

    Installment n (0-based) falls n cadence units after the rental start.
    With charge_first_upfront the first one is due at booking instead.
    """
    dates: List[date] = []
    for n in range(count):
        if plan_type == PlanType.MONTHLY:
            dates.append(start_date + relativedelta(months=n))
        elif plan_type == PlanType.WEEKLY:
            dates.append(start_date + timedelta(days=7 * n))
        else:
            dates.append(start_date)

    if charge_first_upfront and dates:
        dates[0] = booking_date
    return dates


def build_schedule(
    plan_type: PlanType,
    total: Decimal,
    count: int,
    start_date: date,
    booking_date: date,
    charge_first_upfront: bool,
) -> List[Tuple[int, Decimal, date]]:
    """(installment_number, amount, due_date) for every installment"""
    amounts = split_amounts(total, count)
    dates = due_dates(plan_type, count, start_date, booking_date, charge_first_upfront)
    return [(n + 1, amounts[n], dates[n]) for n in range(count)]


def is_past_grace(due_date: date, config: InstallmentConfig, today: date) -> bool:
    return today > due_date + timedelta(days=config.grace_period_days)


def after_failure(
    due_date: date,
    failure_count: int,
    config: InstallmentConfig,
    failed_on: date,
) -> Tuple[InstallmentStatus, Optional[date]]:
    """
    Status and next retry date after a failed charge

    ``failure_count`` includes the failure just recorded. Up to
    max_retry_attempts retries are spaced retry_interval_days apart; an
    installment past its grace period is overdue whatever retries remain.
    """
    if is_past_grace(due_date, config, failed_on):
        return InstallmentStatus.OVERDUE, None

    if failure_count <= config.max_retry_attempts:
        return InstallmentStatus.FAILED, failed_on + timedelta(days=config.retry_interval_days)

    return InstallmentStatus.FAILED, None


def option_amounts(
    plan_type: PlanType,
    rental_days: int,
    config: InstallmentConfig,
    breakdown: PriceBreakdownDTO,
) -> Tuple[int, Decimal, Decimal, Decimal]:
    """(count, installment amount, installable, upfront) for one plan type"""
    installable, upfront = split_basis(config.what_gets_split, breakdown)
    count = installment_count(plan_type, rental_days, config)
    amount = split_amounts(installable, count)[0] if installable > ZERO else ZERO
    return count, amount, installable, upfront
