"""Dashboard use cases"""
from .get_dashboard_kpis import GetDashboardKpis, cache_key, utilization_percentage
from .dtos import GetDashboardKpisQueryDTO, DashboardKpisDTO

__all__ = [
    "GetDashboardKpis",
    "cache_key",
    "utilization_percentage",
    "GetDashboardKpisQueryDTO",
    "DashboardKpisDTO",
]
