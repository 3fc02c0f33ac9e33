"""
Auth router: register, login, own profile and password change.
"""
from fastapi import APIRouter, Depends, status
from typing import Dict, Any

from texawave.database import Database, Collections
from texawave.repositories import UserRepository
from texawave.services import AuthService
from texawave.models import UserRegister, UserLogin, TokenResponse, PasswordChange, UserResponse
from texawave.utils.dependencies import get_current_user

router = APIRouter()


async def get_auth_service() -> AuthService:
    return AuthService(UserRepository(Database.get_db()[Collections.USERS]))


@router.post(
    "/register",
    response_model=TokenResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register",
    description="Create an account and return a bearer token. The first account becomes admin."
)
async def register(
    user_data: UserRegister,
    auth_service: AuthService = Depends(get_auth_service)
) -> TokenResponse:
    return await auth_service.register(user_data)


@router.post("/login", response_model=TokenResponse, summary="Login")
async def login(
    credentials: UserLogin,
    auth_service: AuthService = Depends(get_auth_service)
) -> TokenResponse:
    """Wrong email and wrong password both answer 401 "Invalid credentials"."""
    return await auth_service.login(credentials)


@router.get("/profile", response_model=UserResponse, summary="Own profile")
async def get_profile(
    current_user: Dict[str, Any] = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service)
) -> Dict[str, Any]:
    return await auth_service.get_user_profile(current_user["user_id"])


@router.post("/change-password", summary="Change own password")
async def change_password(
    password_data: PasswordChange,
    current_user: Dict[str, Any] = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service)
) -> Dict[str, str]:
    await auth_service.change_password(
        user_id=current_user["user_id"],
        old_password=password_data.old_password,
        new_password=password_data.new_password
    )
    return {"message": "Password changed successfully"}
