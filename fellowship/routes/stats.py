"""Dashboard statistics routes"""

from fastapi import APIRouter, Depends

from fellowship.auth.jwt import get_current_user
from fellowship.dependencies import get_family_service
from fellowship.models import OverviewStats
from fellowship.services.family_service import FamilyService

router = APIRouter()


@router.get("/overview", response_model=OverviewStats)
async def overview(
    current_user: dict = Depends(get_current_user),
    families: FamilyService = Depends(get_family_service)
):
    """Totals for the super-admin dashboard"""
    return families.get_overview_stats(current_user)
