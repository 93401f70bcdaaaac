"""
GET /api/v1/appinfo — the authenticated user and the running version
"""
from fastapi import APIRouter, Depends

from docstore.config import Settings
from docstore.dependencies import get_settings
from docstore.schemas import AppInfo, UserInfo, VersionInfo
from docstore.security import User, current_user

router = APIRouter()


@router.get("/appinfo", response_model=AppInfo)
def get_app_info(
    user: User = Depends(current_user),
    settings: Settings = Depends(get_settings),
):
    return AppInfo(
        user_info=UserInfo(
            display_name=user.display_name,
            user_id=user.user_id,
            user_name=user.username,
            email=user.email,
            roles=user.roles,
        ),
        version_info=VersionInfo(
            version=settings.app.version,
            build_number=settings.app.build,
        ),
    )
