from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from school_directory.core.database import get_db
from school_directory.core.deps import get_current_user
from school_directory.schemas.auth import ProfileData
from school_directory.schemas.response import ApiResponse
from school_directory.schemas.school import SchoolResponse
from school_directory.schemas.user import UserResponse
from school_directory.services import auth as auth_service
from school_directory.services import school as school_service

router = APIRouter(
    prefix="/profile",
    tags=["Profile"],
    dependencies=[Depends(get_current_user)]
)

@router.get("", response_model=ApiResponse[ProfileData])
def get_profile(
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user)
):
    user = auth_service.get_user(db, user_id)
    schools = school_service.list_schools(db, owner_id=user_id)

    return ApiResponse(
        success=True,
        message="Profile retrieved successfully",
        data=ProfileData(
            user=UserResponse.model_validate(user),
            schools=[SchoolResponse(**school) for school in schools]
        )
    )
