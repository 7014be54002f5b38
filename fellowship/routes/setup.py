"""First-run setup routes"""

import logging

from fastapi import APIRouter, Depends, status

from fellowship.dependencies import get_setup_service
from fellowship.models import SetupRequest, SetupStatus, User
from fellowship.services.setup_service import SetupService

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/status", response_model=SetupStatus)
async def setup_status(setup: SetupService = Depends(get_setup_service)):
    """Whether the deployment has been initialized"""
    return setup.get_status()


@router.post("", response_model=User, status_code=status.HTTP_201_CREATED)
async def run_setup(
    request: SetupRequest,
    setup: SetupService = Depends(get_setup_service)
):
    """
    Initialize the deployment.
    Creates the super-admin account and, if enabled, the default families.
    Fails once the deployment is initialized.
    """
    admin = request.super_admin
    return setup.initialize(
        church_name=request.church_name,
        email=admin.email,
        password=admin.password,
        display_name=admin.display_name,
        phone_number=admin.phone_number
    )
