from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class SubjectCreate(BaseModel):
    name: str = Field(..., min_length=1, description="Subject name")
    code: str = Field(..., min_length=1, max_length=50, description="Unique subject code")
    description: Optional[str] = None
    credits: int = Field(..., gt=0)


class SubjectResponse(BaseModel):
    id: int
    name: str
    code: str
    description: Optional[str] = None
    credits: int
    created_at: datetime

    class Config:
        from_attributes = True
