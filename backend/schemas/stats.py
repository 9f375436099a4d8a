from typing import List
from schemas.base import CamelModel

class StatsSummary(CamelModel):
    total_faculty: int
    total_hods: int
    total_achievements: int
    approved: int
    pending: int
    rejected: int

class YearCount(CamelModel):
    year: int
    approved: int
    pending: int
    rejected: int
    total: int

class YearStatsResponse(CamelModel):
    data: List[YearCount]

# Schema for most-awarded faculty
class TopFaculty(CamelModel):
    teacher_id: str
    name: str
    approved_count: int

class TopFacultyResponse(CamelModel):
    data: List[TopFaculty]
