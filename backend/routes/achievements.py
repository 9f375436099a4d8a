# backend/routes/achievements.py
import logging
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from database import get_db
from models.achievement import Achievement, AchievementStatus
from models.users import User, UserRole
from schemas.achievement import (
    AchievementCreate, AchievementResponse, AchievementsPage, ReviewRequest,
)
from utils.audit import client_ip, write_log
from utils.exceptions import NotFoundError
from utils.policy import Action, Decision, enforce
from utils.review import review_achievement
from utils.tokenJWT import get_current_user

router = APIRouter(prefix="/achievements", tags=["Achievements"])
logger = logging.getLogger(__name__)

FACULTY_ROLES = (UserRole.TEACHER.value, UserRole.HOD.value)


# Base query narrowed to the rows the caller may see
def _scoped(db: Session, decision: Decision):
    query = db.query(Achievement)
    if decision.owner_filter is not None:
        query = query.filter(Achievement.teacher_id == decision.owner_filter)
    return query


# Role-filtered list: teachers see their own submissions, HODs and admins see all
@router.get("", response_model=AchievementsPage)
def list_achievements(
    status: Optional[AchievementStatus] = Query(None),
    teacher_id: Optional[str] = Query(None),
    academic_year: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=200),
    sort_by: Literal["submitted_at", "certificate_year", "status", "title"] = "submitted_at",
    order: Literal["asc", "desc"] = "desc",
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    decision = enforce(current_user, Action.ACHIEVEMENT_READ, owner_id=teacher_id)
    query = _scoped(db, decision)

    if status:
        query = query.filter(Achievement.status == status.value)
    if teacher_id:
        query = query.filter(Achievement.teacher_id == teacher_id)
    if academic_year:
        query = query.filter(Achievement.academic_year == academic_year)

    sort_map = {
        "submitted_at": Achievement.submitted_at,
        "certificate_year": Achievement.certificate_year,
        "status": Achievement.status,
        "title": Achievement.title,
    }
    col = sort_map.get(sort_by, Achievement.submitted_at)
    if order == "asc":
        query = query.order_by(col.asc(), Achievement.id.asc())
    else:
        query = query.order_by(col.desc(), Achievement.id.desc())

    total = query.count()
    items = query.offset((page - 1) * page_size).limit(page_size).all()
    return {"items": items, "total": total, "page": page, "page_size": page_size}


@router.get("/pending", response_model=List[AchievementResponse])
def list_pending(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    enforce(current_user, Action.ACHIEVEMENT_REVIEW)
    return (
        db.query(Achievement)
        .filter(Achievement.status == AchievementStatus.UNDER_REVIEW.value)
        .order_by(Achievement.submitted_at.asc(), Achievement.id.asc())
        .all()
    )


# The caller's own submissions, whatever their role
@router.get("/me", response_model=List[AchievementResponse])
def list_mine(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    decision = enforce(current_user, Action.ACHIEVEMENT_READ, owner_id=current_user.teacher_id)
    return (
        _scoped(db, decision)
        .filter(Achievement.teacher_id == current_user.teacher_id)
        .order_by(Achievement.submitted_at.desc(), Achievement.id.desc())
        .all()
    )


@router.get("/teacher/{teacher_id}", response_model=List[AchievementResponse])
def list_for_teacher(
    teacher_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    decision = enforce(current_user, Action.ACHIEVEMENT_READ, owner_id=teacher_id)
    return (
        _scoped(db, decision)
        .filter(Achievement.teacher_id == teacher_id)
        .order_by(Achievement.submitted_at.desc(), Achievement.id.desc())
        .all()
    )


@router.get("/{achievement_id}", response_model=AchievementResponse)
def get_achievement(
    achievement_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    decision = enforce(current_user, Action.ACHIEVEMENT_READ)
    achievement = _scoped(db, decision).filter(Achievement.id == achievement_id).first()
    if not achievement:
        raise NotFoundError("Achievement", achievement_id)
    return achievement


# Submit a new achievement; it always starts under review
@router.post("", response_model=AchievementResponse, status_code=201)
def create_achievement(
    payload: AchievementCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    owner_id = payload.teacher_id or current_user.teacher_id
    enforce(current_user, Action.ACHIEVEMENT_CREATE, owner_id=owner_id)

    # Achievements belong to faculty only, never to admin or student accounts
    if owner_id != current_user.teacher_id:
        owner = (
            db.query(User)
            .filter(User.teacher_id == owner_id, User.role.in_(FACULTY_ROLES))
            .first()
        )
        if not owner:
            raise NotFoundError("Teacher", owner_id)

    achievement = Achievement(
        teacher_id=owner_id,
        academic_year=payload.academic_year,
        certificate_year=payload.certificate_year,
        title=payload.title,
        description=payload.description,
        certificate_link=payload.certificate_link,
        status=AchievementStatus.UNDER_REVIEW.value,
    )
    db.add(achievement)
    db.commit()
    db.refresh(achievement)

    logger.info("Achievement %s submitted for %s by %s", achievement.id, owner_id, current_user.teacher_id)
    write_log(db, actor=current_user.teacher_id, action="ACHIEVEMENT_CREATE", resource="achievement",
              ip=client_ip(request), meta={"id": achievement.id, "teacher_id": owner_id})
    return achievement


# Approve or reject an achievement (HOD and admin)
@router.put("/{achievement_id}/review", response_model=AchievementResponse)
def review(
    achievement_id: int,
    payload: ReviewRequest,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    achievement = review_achievement(db, achievement_id, payload.status, current_user, payload.comment)

    write_log(db, actor=current_user.teacher_id, action="ACHIEVEMENT_REVIEW", resource="achievement",
              ip=client_ip(request), meta={"id": achievement_id, "status": achievement.status})
    return achievement
