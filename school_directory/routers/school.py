from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from school_directory.core.database import get_db
from school_directory.core.deps import get_current_user
from school_directory.schemas.response import ApiResponse
from school_directory.schemas.school import SchoolIn, SchoolResponse
from school_directory.services import school as school_service

router = APIRouter(
    prefix="/schools",
    tags=["Schools"]
)

@router.get("", response_model=ApiResponse[List[SchoolResponse]])
def list_schools(
    search: Optional[str] = Query(None),
    db: Session = Depends(get_db)
):
    schools = school_service.list_schools(db, search=search)
    return ApiResponse(success=True, data=schools)

@router.get("/{school_id}", response_model=ApiResponse[SchoolResponse])
def get_school(school_id: int, db: Session = Depends(get_db)):
    return ApiResponse(success=True, data=school_service.get_school(db, school_id))

@router.post("", response_model=ApiResponse[SchoolResponse], status_code=status.HTTP_201_CREATED)
def create_school(
    data: SchoolIn,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user)
):
    school = school_service.create_school(db, data.model_dump(), user_id)
    return ApiResponse(success=True, message="School created successfully", data=school)

@router.put("/{school_id}", response_model=ApiResponse[SchoolResponse])
def update_school(
    school_id: int,
    data: SchoolIn,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user)
):
    school = school_service.update_school(db, school_id, data.model_dump(), user_id)
    return ApiResponse(success=True, message="School updated successfully", data=school)

@router.delete("/{school_id}", response_model=ApiResponse)
def delete_school(
    school_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user)
):
    school_service.delete_school(db, school_id, user_id)
    return ApiResponse(success=True, message="School deleted successfully")
