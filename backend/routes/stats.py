# backend/routes/stats.py

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sqlalchemy import func

from database import get_db
from utils.tokenJWT import get_current_user
from utils.policy import Action, enforce
from models.users import User, UserRole
from models.achievement import Achievement, AchievementStatus
from schemas.stats import (
    StatsSummary, TopFaculty, TopFacultyResponse, YearCount, YearStatsResponse,
)

router = APIRouter(
    prefix="/stats",
    tags=["Stats"]
)

TOP_FACULTY_LIMIT = 5

_STATUS_KEYS = {
    AchievementStatus.APPROVED.value: "approved",
    AchievementStatus.UNDER_REVIEW.value: "pending",
    AchievementStatus.REJECTED.value: "rejected",
}


# === Endpoint 1: Dashboard Summary ===

@router.get("/summary", response_model=StatsSummary)
def get_stats_summary(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    enforce(current_user, Action.STATS_READ)

    # Users per role
    role_counts = dict(db.query(User.role, func.count(User.id)).group_by(User.role).all())
    total_hods = role_counts.get(UserRole.HOD.value, 0)
    total_faculty = role_counts.get(UserRole.TEACHER.value, 0) + total_hods

    # Achievements per status
    status_counts = dict(
        db.query(Achievement.status, func.count(Achievement.id)).group_by(Achievement.status).all()
    )
    counts = {key: status_counts.get(status, 0) for status, key in _STATUS_KEYS.items()}

    return StatsSummary(
        total_faculty=total_faculty,
        total_hods=total_hods,
        total_achievements=sum(status_counts.values()),
        **counts,
    )

# === Endpoint 2: Chart Data ===

@router.get("/by-year", response_model=YearStatsResponse)
def get_stats_by_year(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    enforce(current_user, Action.STATS_READ)

    rows = (
        db.query(
            Achievement.certificate_year.label("year"),
            Achievement.status.label("status"),
            func.count(Achievement.id).label("count"),
        )
        .group_by(Achievement.certificate_year, Achievement.status)
        .order_by(Achievement.certificate_year)
        .all()
    )

    by_year = {}
    for row in rows:
        bucket = by_year.setdefault(row.year, {"approved": 0, "pending": 0, "rejected": 0})
        key = _STATUS_KEYS.get(row.status)
        if key:
            bucket[key] += row.count

    data = [
        YearCount(year=year, total=sum(bucket.values()), **bucket)
        for year, bucket in sorted(by_year.items())
    ]
    return YearStatsResponse(data=data)

# === Endpoint 3: Top faculty by approved achievements ===

@router.get("/top-faculty", response_model=TopFacultyResponse)
def get_top_faculty(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    enforce(current_user, Action.STATS_READ)

    approved_count = func.count(Achievement.id)
    rows = (
        db.query(
            User.teacher_id.label("teacher_id"),
            User.name.label("name"),
            approved_count.label("approved_count"),
        )
        .join(Achievement, Achievement.teacher_id == User.teacher_id)
        .filter(Achievement.status == AchievementStatus.APPROVED.value)
        .group_by(User.teacher_id, User.name)
        .order_by(approved_count.desc(), User.teacher_id.asc())
        .limit(TOP_FACULTY_LIMIT)
        .all()
    )

    return TopFacultyResponse(
        data=[TopFaculty(teacher_id=r.teacher_id, name=r.name, approved_count=r.approved_count) for r in rows]
    )
