"""Data Transfer Objects for the Dashboard"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GetDashboardKpisQueryDTO(BaseModel):
    """Query parameters of the KPI endpoint; dates are raw YYYY-MM-DD strings"""

    tenant_id: Optional[str] = None
    date_from: Optional[str] = None
    date_to: Optional[str] = None
    tz: Optional[str] = None


class AmountKpiDTO(_CamelModel):
    count: int = 0
    amount: Decimal = Decimal("0")


class CountKpiDTO(_CamelModel):
    count: int = 0


class FinesKpiDTO(_CamelModel):
    count: int = 0
    amount: Decimal = Decimal("0")
    due_soon_count: int = 0


class RevenueKpiDTO(_CamelModel):
    amount: Decimal = Decimal("0")


class FleetUtilizationDTO(_CamelModel):
    total: int = 0
    rented: int = 0
    available: int = 0
    percentage: int = 0


class DashboardKpisDTO(_CamelModel):
    overdue: AmountKpiDTO
    due_today: AmountKpiDTO
    active_rentals: CountKpiDTO
    fines_open: FinesKpiDTO
    monthly_revenue: RevenueKpiDTO
    fleet_utilization: FleetUtilizationDTO
    generated_at: datetime
    timezone: str
