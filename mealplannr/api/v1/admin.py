from fastapi import APIRouter, Depends

from mealplannr.core.permissions import admin_menu, admin_redirect, primary_role
from mealplannr.dependencies import get_current_user
from mealplannr.models.user import User
from mealplannr.schemas.admin import NavigationResponse
from mealplannr.schemas.result import Result

router = APIRouter()


@router.get("/navigation", response_model=Result[NavigationResponse])
async def get_navigation(current_user: User = Depends(get_current_user)):
    """Backend sections the current user may see, and where they land on login."""
    role = primary_role(current_user)
    return Result.successful(
        data=NavigationResponse(
            role=role.value if role else None,
            sections=admin_menu(current_user),
            landing_page=admin_redirect(current_user, "index.php"),
        )
    )
