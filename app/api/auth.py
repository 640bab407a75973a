"""
Auth API Routes
Exposes the current (demo) user.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.deps import get_current_user_id, get_store
from app.schemas.user import UserResponse
from app.services.store import BaseStore

router = APIRouter()


@router.get("/user", response_model=UserResponse)
async def current_user(
    user_id: str = Depends(get_current_user_id),
    store: BaseStore = Depends(get_store),
):
    user = store.get_user(user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user
