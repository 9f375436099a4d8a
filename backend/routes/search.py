# backend/routes/search.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import or_
from sqlalchemy.orm import Session

from database import get_db
from models.achievement import Achievement, AchievementStatus
from models.users import User, UserRole
from schemas.achievement import AchievementResponse, FacultyProfile
from schemas.user import PublicUserResponse
from utils.exceptions import NotFoundError
from utils.policy import Action, enforce

# Public endpoints: no token required, approved achievements only
router = APIRouter(prefix="/search", tags=["Search"])

FACULTY_ROLES = (UserRole.TEACHER.value, UserRole.HOD.value)


def _approved(db: Session):
    return db.query(Achievement).filter(Achievement.status == AchievementStatus.APPROVED.value)


@router.get("/faculty", response_model=List[PublicUserResponse])
def search_faculty(
    q: Optional[str] = Query(None, description="Name or teacher id fragment"),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
):
    enforce(None, Action.PUBLIC_READ)
    query = db.query(User).filter(User.role.in_(FACULTY_ROLES))
    if q and q.strip():
        like = f"%{q.strip()}%"
        query = query.filter(or_(User.name.ilike(like), User.teacher_id.ilike(like)))
    return query.order_by(User.name.asc()).limit(limit).all()


@router.get("/faculty/{teacher_id}", response_model=FacultyProfile)
def faculty_profile(teacher_id: str, db: Session = Depends(get_db)):
    enforce(None, Action.PUBLIC_READ)
    user = (
        db.query(User)
        .filter(User.teacher_id == teacher_id, User.role.in_(FACULTY_ROLES))
        .first()
    )
    if not user:
        raise NotFoundError("Faculty", teacher_id)

    achievements = (
        _approved(db)
        .filter(Achievement.teacher_id == teacher_id)
        .order_by(Achievement.certificate_year.desc(), Achievement.id.desc())
        .all()
    )
    return FacultyProfile(
        teacher_id=user.teacher_id,
        name=user.name,
        designation=user.designation,
        role=user.role,
        achievements=[AchievementResponse.model_validate(a) for a in achievements],
    )


@router.get("/achievements", response_model=List[AchievementResponse])
def search_achievements(
    teacher_id: Optional[str] = Query(None),
    q: Optional[str] = Query(None, description="Title fragment"),
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
):
    enforce(None, Action.PUBLIC_READ)
    query = _approved(db)
    if teacher_id:
        query = query.filter(Achievement.teacher_id == teacher_id)
    if q and q.strip():
        query = query.filter(Achievement.title.ilike(f"%{q.strip()}%"))
    return query.order_by(Achievement.reviewed_at.desc(), Achievement.id.desc()).limit(limit).all()
