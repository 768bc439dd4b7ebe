"""
Authentication Routes
Registration, OTP verification, login and password endpoints
"""

import logging

from fastapi import APIRouter, Depends, Request, status

from app.auth import get_current_user
from app.schemas.auth import (
    StudentRegisterRequest,
    CoachRegisterRequest,
    InstituteRegisterRequest,
    ClubRegisterRequest,
    LoginRequest,
    VerifyOtpRequest,
    EmailRequest,
    ResetPasswordRequest,
    ChangePasswordRequest,
)
from app.services.auth_service import auth_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/register/student", status_code=status.HTTP_201_CREATED)
async def register_student(request: StudentRegisterRequest):
    """
    Register a student

    The account stays unverified until the emailed 6-digit OTP is confirmed.
    """
    return await auth_service.register("STUDENT", request.model_dump())


@router.post("/register/coach", status_code=status.HTTP_201_CREATED)
async def register_coach(request: CoachRegisterRequest):
    """Register a coach (subscription payment and admin approval follow)"""
    return await auth_service.register("COACH", request.model_dump())


@router.post("/register/institute", status_code=status.HTTP_201_CREATED)
async def register_institute(request: InstituteRegisterRequest):
    return await auth_service.register("INSTITUTE", request.model_dump())


@router.post("/register/club", status_code=status.HTTP_201_CREATED)
async def register_club(request: ClubRegisterRequest):
    return await auth_service.register("CLUB", request.model_dump())


@router.post("/verify-otp")
async def verify_otp(request: VerifyOtpRequest):
    return await auth_service.verify_otp(request.email, request.otp)


@router.post("/resend-otp")
async def resend_otp(request: EmailRequest):
    return await auth_service.resend_otp(request.email)


@router.post("/login")
async def login(credentials: LoginRequest, request: Request):
    """
    Login for every role

    - **role**: optional; when given it must match the account
    """
    client_ip = request.client.host if request.client else None
    return await auth_service.login(credentials.email, credentials.password, credentials.role, client_ip)


@router.post("/forgot-password")
async def forgot_password(request: EmailRequest):
    return await auth_service.forgot_password(request.email)


@router.post("/reset-password")
async def reset_password(request: ResetPasswordRequest):
    return await auth_service.reset_password(request.token, request.new_password)


@router.post("/change-password")
async def change_password(
    request: ChangePasswordRequest,
    current_user: dict = Depends(get_current_user)
):
    return await auth_service.change_password(current_user["id"], request.current_password, request.new_password)


@router.post("/logout")
async def logout(current_user: dict = Depends(get_current_user)):
    """Tokens are stateless; the client discards its copy"""
    logger.info("[AUTH] %s logged out", current_user["unique_id"])
    return {"status": "success", "message": "Logged out successfully"}


@router.get("/me")
async def get_me(current_user: dict = Depends(get_current_user)):
    return await auth_service.get_me(current_user)
