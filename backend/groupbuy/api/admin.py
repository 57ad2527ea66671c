"""
Admin API - Dashboard Endpoints
Store-wide counters and recent activity for administrators
"""
from fastapi import APIRouter, Depends, HTTPException, Query

from groupbuy.api.deps import get_dashboard_service
from groupbuy.core.auth import TokenUser, require_admin
from groupbuy.services.dashboard_service import DashboardService

router = APIRouter()


@router.get("/stats")
async def get_dashboard_stats(
    recent: int = Query(5, ge=1, le=50, description="Rows in each recent list"),
    admin: TokenUser = Depends(require_admin),
    service: DashboardService = Depends(get_dashboard_service)
):
    """
    Dashboard overview

    Returns:
        total_users, total_products, active_products, total_orders and the
        newest products, users and orders
    """
    try:
        return {"status": "success", "data": service.get_stats(recent_limit=recent)}
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching dashboard stats: {str(e)}")
