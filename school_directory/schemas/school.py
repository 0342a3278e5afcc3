from datetime import datetime
from pydantic import BaseModel, ConfigDict
from typing import Optional, Union

class SchoolIn(BaseModel):
    """Used for both create and full-row update."""

    name: str
    address: str
    city: str
    state: str
    contact: Union[str, int]
    email_id: str
    image: Optional[str] = None

class SchoolResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    address: str
    city: str
    state: str
    contact: int
    image: Optional[str] = None
    email_id: str
    created_by: Optional[int] = None
    created_by_email: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
