"""GetDashboardKpis Use Case

Operations dashboard headline numbers, cached briefly per tenant, range and
timezone.
"""

import asyncio
import logging
import re
from datetime import date, datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Callable, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
from libs.result import Result, Return, Error
from src.app.repositories.dashboard_repository import DashboardRepository
from src.app.services.cache import Cache
from src.domain.base import utc_now
from src.domain.money import ZERO, to_money
from .dtos import (
    GetDashboardKpisQueryDTO,
    DashboardKpisDTO,
    AmountKpiDTO,
    CountKpiDTO,
    FinesKpiDTO,
    RevenueKpiDTO,
    FleetUtilizationDTO,
)

logger = logging.getLogger(__name__)

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
FINES_DUE_SOON_DAYS = 7


def cache_key(tenant_id: Optional[str], date_from: Optional[str], date_to: Optional[str], tz: str) -> str:
    return f"dashboard:{tenant_id or 'all'}:{date_from or 'no-from'}:{date_to or 'no-to'}:{tz}"


def utilization_percentage(rented: int, total: int) -> int:
    if total <= 0:
        return 0
    return int((Decimal(rented) * 100 / Decimal(total)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class GetDashboardKpis:
    """
    Use Case: Compute dashboard KPIs

    Business Rules:
    1. from/to must be YYYY-MM-DD calendar dates and tz a valid IANA zone
    2. "Today" is the calendar date in the requested timezone
    3. The six aggregates run concurrently; one failing is logged and
       reported as zero rather than failing the whole response
    4. Revenue is only computed when both from and to are given
    5. Responses are cached for the cache's TTL
    """

    def __init__(
        self,
        dashboard_repo: DashboardRepository,
        cache: Cache,
        default_timezone: str = "Europe/London",
        clock: Callable[[], datetime] = utc_now,
    ):
        self.dashboard_repo = dashboard_repo
        self.cache = cache
        self.default_timezone = default_timezone
        self.clock = clock

    async def execute(self, query: GetDashboardKpisQueryDTO) -> Result[DashboardKpisDTO]:
        # Step 1: Validate
        start = end = None
        for field, raw in (("from", query.date_from), ("to", query.date_to)):
            if raw is None:
                continue
            parsed = self._parse_date(raw)
            if parsed is None:
                return Return.err(
                    Error(
                        code="INVALID_DATE",
                        message=f"Invalid {field} date format. Expected YYYY-MM-DD",
                    )
                )
            if field == "from":
                start = parsed
            else:
                end = parsed

        tz_name = query.tz or self.default_timezone
        try:
            zone = ZoneInfo(tz_name)
        except (ZoneInfoNotFoundError, ValueError):
            return Return.err(
                Error(code="INVALID_TIMEZONE", message=f"Unknown timezone: {tz_name}")
            )

        # Step 2: Cache
        key = cache_key(query.tenant_id, query.date_from, query.date_to, tz_name)
        cached = self.cache.get(key)
        if cached is not None:
            return Return.ok(cached)

        # Step 3: Aggregate
        now = self.clock()
        today = now.astimezone(zone).date()
        tenant_id = query.tenant_id

        revenue_query = (
            self.dashboard_repo.collected_revenue(tenant_id, start, end)
            if start and end
            else self._zero()
        )

        results = await asyncio.gather(
            self.dashboard_repo.overdue_rental_charges(tenant_id, today),
            self.dashboard_repo.rental_charges_due_on(tenant_id, today),
            self.dashboard_repo.active_rentals(tenant_id),
            self.dashboard_repo.open_fines(tenant_id, today, today + timedelta(days=FINES_DUE_SOON_DAYS)),
            revenue_query,
            self.dashboard_repo.fleet_counts(tenant_id),
            return_exceptions=True,
        )

        names = ("overdue", "due_today", "active_rentals", "fines_open", "monthly_revenue", "fleet_utilization")
        defaults = ((0, ZERO), (0, ZERO), 0, (0, ZERO, 0), ZERO, (0, 0, 0))
        values = []
        for name, result, default in zip(names, results, defaults):
            if isinstance(result, BaseException):
                logger.error(f"Dashboard query {name} failed: {result}")
                values.append(default)
            else:
                values.append(result)

        overdue, due_today, active, fines, revenue, fleet = values
        total, rented, available = fleet

        kpis = DashboardKpisDTO(
            overdue=AmountKpiDTO(count=overdue[0], amount=to_money(overdue[1])),
            due_today=AmountKpiDTO(count=due_today[0], amount=to_money(due_today[1])),
            active_rentals=CountKpiDTO(count=active),
            fines_open=FinesKpiDTO(count=fines[0], amount=to_money(fines[1]), due_soon_count=fines[2]),
            monthly_revenue=RevenueKpiDTO(amount=to_money(revenue)),
            fleet_utilization=FleetUtilizationDTO(
                total=total,
                rented=rented,
                available=available,
                percentage=utilization_percentage(rented, total),
            ),
            generated_at=now,
            timezone=tz_name,
        )

        self.cache.set(key, kpis)
        return Return.ok(kpis)

    @staticmethod
    def _parse_date(raw: str) -> Optional[date]:
        if not DATE_PATTERN.match(raw):
            return None
        try:
            return date.fromisoformat(raw)
        except ValueError:
            return None

    @staticmethod
    async def _zero() -> Decimal:
        return ZERO
