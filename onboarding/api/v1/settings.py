"""
Read-only onboarding settings, visible to every authenticated role.
"""
from fastapi import APIRouter, Depends

from onboarding.api import deps
from onboarding.api.deps import ServiceContainer
from onboarding.schemas.settings import SettingsSnapshot
from onboarding.services.common import Principal

router = APIRouter(prefix="/settings", tags=["Settings"])


@router.get("", response_model=SettingsSnapshot)
def read_settings(
    principal: Principal = Depends(deps.get_principal),
    container: ServiceContainer = Depends(deps.get_container),
):
    return container.settings.get_settings()
