from datetime import datetime
from typing import List, Optional

from pydantic import Field, HttpUrl, TypeAdapter, ValidationError, field_validator

from models.achievement import AchievementStatus
from schemas.base import CamelModel

MIN_CERTIFICATE_YEAR = 2000

_http_url = TypeAdapter(HttpUrl)

# Input schema for submitting an achievement
class AchievementCreate(CamelModel):
    academic_year: str = Field(min_length=1, max_length=16)
    certificate_year: int
    title: str = Field(min_length=5)
    description: str = Field(min_length=10)
    # Checked as an http(s) URL but stored exactly as submitted
    certificate_link: str
    # Defaults to the caller; only HODs may name someone else
    teacher_id: Optional[str] = None

    class Config:
        str_strip_whitespace = True

    @field_validator("certificate_year")
    @classmethod
    def _year_in_range(cls, value: int) -> int:
        if value < MIN_CERTIFICATE_YEAR:
            raise ValueError(f"Year must be {MIN_CERTIFICATE_YEAR} or later")
        if value > datetime.now().year:
            raise ValueError("Year cannot be in the future")
        return value

    @field_validator("certificate_link")
    @classmethod
    def _link_is_url(cls, value: str) -> str:
        try:
            _http_url.validate_python(value)
        except ValidationError:
            raise ValueError("Certificate link must be a valid http(s) URL")
        return value

# Output schema for an achievement record
class AchievementResponse(CamelModel):
    id: int
    teacher_id: str
    academic_year: str
    certificate_year: int
    title: str
    description: str
    certificate_link: str
    status: AchievementStatus
    submitted_at: Optional[datetime] = None
    reviewed_at: Optional[datetime] = None
    reviewed_by: Optional[str] = None
    review_comment: Optional[str] = None

# Body of PUT /achievements/{id}/review
class ReviewRequest(CamelModel):
    status: str
    comment: Optional[str] = Field(default=None, max_length=500)

# Schema for paginated achievement lists
class AchievementsPage(CamelModel):
    items: List[AchievementResponse]
    total: int
    page: int
    page_size: int

# Public profile with approved achievements only
class FacultyProfile(CamelModel):
    teacher_id: str
    name: str
    designation: Optional[str] = None
    role: str
    achievements: List[AchievementResponse]
