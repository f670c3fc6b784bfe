"""
Schemas for API responses and requests
"""

from salon_os.schemas.token import LoginRequest, TokenResponse
from salon_os.schemas.user import UserCreate, UserResponse

__all__ = [
    "LoginRequest",
    "TokenResponse",
    "UserCreate",
    "UserResponse",
]
