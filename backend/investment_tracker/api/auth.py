"""
Authentication API Endpoints
Identity of the bearer-token holder
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from typing import Optional
import logging

from investment_tracker.core.auth import get_current_user
from investment_tracker.models.user import User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


class UserResponse(BaseModel):
    id: int
    email: str
    name: Optional[str]
    role: str
    created_at: Optional[str]
    last_login: Optional[str]


@router.get("/me", response_model=UserResponse)
def get_current_user_info(current_user: User = Depends(get_current_user)):
    """Get current authenticated user information"""
    logger.debug(f"Resolved identity for user {current_user.id}")
    return current_user.to_dict()
