"""
Auth Router: Register • Login • Profile • Password
===================================================

Bearer-token authentication: `register` and `login` return a signed JWT
whose `sub` is the user id; every other route here expects it in
``Authorization: Bearer <token>``.
"""

import logging

from fastapi import APIRouter, Depends

from humanlenk.api.dependencies import current_user_id, get_app_settings, get_current_user, get_session_factory
from humanlenk.api.models import PasswordChange, ProfileUpdate, RegisterDetails, UserCredentials
from humanlenk.api.utils import create_access_token
from humanlenk.database.config.config import Settings
from humanlenk.database.core.funcs import authenticate_user, change_password, get_profile, register_user, update_profile

router = APIRouter(prefix="/api/auth", tags=["Auth"])
logger = logging.getLogger(__name__)


@router.post("/register", status_code=201)
def register(data: RegisterDetails, settings: Settings = Depends(get_app_settings), session_factory=Depends(get_session_factory)):
    """Register a new account and sign the caller in.

    Response:
        201: {user, token}
        409: email already registered
    """
    user = register_user(
        email=data.email,
        password=data.password,
        name=data.name,
        bcrypt_rounds=settings.BCRYPT_ROUNDS,
        session_factory=session_factory,
    )
    token = create_access_token({"sub": user["id"]}, settings)
    return {"success": True, "message": "User registered successfully", "data": {"user": user, "token": token}}


@router.post("/login")
def login(data: UserCredentials, settings: Settings = Depends(get_app_settings), session_factory=Depends(get_session_factory)):
    """Authenticate with email and password.

    Response:
        200: {user, token}
        401: Invalid email or password
    """
    user = authenticate_user(email=data.email, password=data.password, session_factory=session_factory)
    token = create_access_token({"sub": user["id"]}, settings)
    return {"success": True, "message": "Login successful", "data": {"user": user, "token": token}}


@router.get("/me")
def me(user: dict = Depends(get_current_user), session_factory=Depends(get_session_factory)):
    """Profile of the caller with counts of their files, messages and surveys."""
    profile = get_profile(user_id=current_user_id(user), session_factory=session_factory)
    return {"success": True, "data": profile}


@router.patch("/me")
def update_me(data: ProfileUpdate, user: dict = Depends(get_current_user), session_factory=Depends(get_session_factory)):
    updated = update_profile(
        user_id=current_user_id(user),
        name=data.name,
        email=data.email,
        session_factory=session_factory,
    )
    return {"success": True, "message": "Profile updated successfully", "data": updated}


@router.post("/change-password")
def change_my_password(
    data: PasswordChange,
    user: dict = Depends(get_current_user),
    settings: Settings = Depends(get_app_settings),
    session_factory=Depends(get_session_factory),
):
    change_password(
        user_id=current_user_id(user),
        current_password=data.current_password,
        new_password=data.new_password,
        bcrypt_rounds=settings.BCRYPT_ROUNDS,
        session_factory=session_factory,
    )
    return {"success": True, "message": "Password changed successfully"}
