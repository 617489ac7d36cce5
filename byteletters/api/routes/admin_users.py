from fastapi import APIRouter, Depends

from byteletters.adapters.sqlite.repos import SQLiteUserStore
from byteletters.api.deps import get_user_store, require_admin
from byteletters.api.schemas import UserResponse
from byteletters.domain.entities import User

router = APIRouter()


@router.get("", response_model=list[UserResponse])
def list_users(
    admin: User = Depends(require_admin),
    user_store: SQLiteUserStore = Depends(get_user_store),
) -> list[UserResponse]:
    """List all users (admin only)."""
    return [UserResponse.model_validate(u) for u in user_store.list_all()]
