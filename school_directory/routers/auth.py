import os
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session
from school_directory.core.database import get_db
from school_directory.core.deps import AUTH_COOKIE_NAME
from school_directory.core.errors import DeliveryFailed
from school_directory.core.security import JWT_EXPIRE_MINUTES
from school_directory.schemas.user import UserRegister, UserLogin, UserResponse
from school_directory.schemas.response import ApiResponse
from school_directory.schemas.auth import LoginData, RegisterData
from school_directory.services import auth as auth_service

COOKIE_SECURE = os.getenv("AUTH_COOKIE_SECURE", "false").lower() in ("1", "true", "yes")

router = APIRouter(tags=["Auth"])

@router.post("/register", response_model=ApiResponse[RegisterData], status_code=status.HTTP_201_CREATED)
async def register(data: UserRegister, db: Session = Depends(get_db)):
    try:
        user = await auth_service.register(db, data.email, data.password)
    except DeliveryFailed as exc:
        exc.data = {"user": UserResponse.model_validate(exc.data).model_dump(mode="json")}
        exc.message = "Account created, but the verification email could not be sent. Request a new code."
        raise

    return ApiResponse(
        success=True,
        message="Registered successfully. Check your email for the verification code.",
        data=RegisterData(user=UserResponse.model_validate(user))
    )

@router.post("/login", response_model=ApiResponse[LoginData])
def login(data: UserLogin, response: Response, db: Session = Depends(get_db)):
    user, token = auth_service.login(db, data.email, data.password)

    response.set_cookie(
        key=AUTH_COOKIE_NAME,
        value=token,
        max_age=JWT_EXPIRE_MINUTES * 60,
        httponly=True,
        secure=COOKIE_SECURE,
        samesite="lax",
        path="/"
    )

    return ApiResponse(
        success=True,
        message="Login successfully",
        data=LoginData(user=UserResponse.model_validate(user))
    )

@router.post("/logout", response_model=ApiResponse)
def logout(response: Response):
    response.delete_cookie(key=AUTH_COOKIE_NAME, path="/", httponly=True, secure=COOKIE_SECURE, samesite="lax")
    return ApiResponse(success=True, message="Logged out successfully")
