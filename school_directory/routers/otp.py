from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from school_directory.core.database import get_db
from school_directory.core.errors import DeliveryFailed
from school_directory.schemas.auth import OtpVerify, OtpResend
from school_directory.schemas.response import ApiResponse
from school_directory.schemas.user import UserResponse
from school_directory.services import auth as auth_service

router = APIRouter(tags=["OTP"])

@router.post("/verify-otp", response_model=ApiResponse[UserResponse])
def verify_otp(data: OtpVerify, db: Session = Depends(get_db)):
    user = auth_service.verify_otp(db, data.email, data.otp)

    return ApiResponse(
        success=True,
        message="Email verified successfully. You can now log in.",
        data=UserResponse.model_validate(user)
    )

@router.post("/resend-otp", response_model=ApiResponse)
async def resend_otp(data: OtpResend, db: Session = Depends(get_db)):
    try:
        await auth_service.resend_otp(db, data.email)
    except DeliveryFailed as exc:
        exc.data = None
        raise

    return ApiResponse(success=True, message="A new verification code has been sent.")
