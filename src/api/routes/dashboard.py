"""Dashboard API Routes"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from config import ApplicationConfig
from src.api.dependencies.auth import Principal, require_operator
from src.app.repositories.dashboard_repository import DashboardRepository
from src.app.services.cache import Cache
from src.app.use_cases.dashboard.dtos import DashboardKpisDTO, GetDashboardKpisQueryDTO
from src.app.use_cases.dashboard.get_dashboard_kpis import GetDashboardKpis
from src.depends import get_dashboard_repository, get_dashboard_cache
from src.api.error import ClientError

router = APIRouter(tags=["Dashboard"])


@router.get(
    "/dashboard-kpis",
    response_model=DashboardKpisDTO,
    response_model_by_alias=True,
    status_code=status.HTTP_200_OK,
    responses={
        400: {
            "description": "Invalid date or timezone",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "INVALID_DATE",
                            "message": "Invalid from date format. Use YYYY-MM-DD"
                        }
                    }
                }
            }
        }
    }
)
async def get_dashboard_kpis(
    date_from: Optional[str] = Query(default=None, alias="from"),
    date_to: Optional[str] = Query(default=None, alias="to"),
    tz: Optional[str] = Query(default=None),
    tenant_id: Optional[str] = Query(default=None),
    dashboard_repo: DashboardRepository = Depends(get_dashboard_repository),
    cache: Cache = Depends(get_dashboard_cache),
    principal: Principal = Depends(require_operator),
):
    """
    Operator dashboard KPIs.

    Overdue and due-today rental charges, active rentals, open fines,
    revenue over `from`..`to` (captured payments only, local days in `tz`),
    and fleet utilisation. Results are cached per tenant, range and timezone
    for a short time.

    **Query parameters:**
    - `from`, `to` (optional): YYYY-MM-DD
    - `tz` (optional): IANA timezone, default Europe/London
    - `tenant_id` (optional): ignored for tenant-bound users

    **Returns:**
    - 200: KPIs
    - 400: Invalid date or timezone
    """
    query = GetDashboardKpisQueryDTO(
        tenant_id=principal.tenant_id or tenant_id,
        date_from=date_from,
        date_to=date_to,
        tz=tz,
    )

    use_case = GetDashboardKpis(
        dashboard_repo,
        cache,
        default_timezone=ApplicationConfig.DEFAULT_TIMEZONE,
    )
    result = await use_case.execute(query)

    if result.is_err():
        raise ClientError(result.error)

    return result.value
