from typing import List
from pydantic import BaseModel, EmailStr, Field
from school_directory.schemas.user import UserResponse
from school_directory.schemas.school import SchoolResponse

class OtpVerify(BaseModel):
    email: EmailStr
    otp: str = Field(min_length=1, max_length=12)

class OtpResend(BaseModel):
    email: EmailStr

class LoginData(BaseModel):
    user: UserResponse

class RegisterData(BaseModel):
    user: UserResponse

class ProfileData(BaseModel):
    user: UserResponse
    schools: List[SchoolResponse] = []
