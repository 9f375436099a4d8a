# backend/routes/users.py
import logging
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from database import get_db
from models.users import User
from schemas.user import (
    PasswordChange, RoleUpdate, UserCreate, UserResponse, UsersPage, UserUpdate,
)
from utils.audit import client_ip, write_log
from utils.exceptions import AuthenticationError, ConflictError
from utils.hashing import get_password_hash, verify_password
from utils.policy import Action, enforce
from utils.roles import set_user_role
from utils.tokenJWT import get_current_user

router = APIRouter(prefix="/users", tags=["Users"])
logger = logging.getLogger(__name__)


# Retrieve a list of users with filtering, sorting, and pagination (HOD and admin)
@router.get("", response_model=UsersPage)
def get_all_users(
    q: Optional[str] = Query(None, description="Search by name or teacher id"),
    role: Optional[str] = Query(None, description="Filter by role"),
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=200),
    sort_by: Literal["teacher_id", "name", "role", "created_at"] = "teacher_id",
    order: Literal["asc", "desc"] = "asc",
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    enforce(current_user, Action.USER_READ_ALL)

    query = db.query(User)

    # Filter by name or teacher id
    if q:
        like = f"%{q.strip()}%"
        query = query.filter(or_(User.name.ilike(like), User.teacher_id.ilike(like)))

    # Filter by role
    if role:
        query = query.filter(User.role == role.lower())

    # Apply sorting based on selected field and order
    sort_map = {
        "teacher_id": User.teacher_id,
        "name": User.name,
        "role": User.role,
        "created_at": User.created_at,
    }
    col = sort_map.get(sort_by, User.teacher_id)
    query = query.order_by(col.asc() if order == "asc" else col.desc())

    # Apply pagination
    total = query.count()
    users = query.offset((page - 1) * page_size).limit(page_size).all()

    return {"items": users, "total": total, "page": page, "page_size": page_size}


@router.get("/me", response_model=UserResponse)
def get_me(current_user: User = Depends(get_current_user)):
    enforce(current_user, Action.USER_READ_SELF)
    return current_user


@router.put("/me", response_model=UserResponse)
def update_me(
    payload: UserUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    enforce(current_user, Action.USER_UPDATE_SELF)

    # Only profile fields; role, teacher id and password have their own flows
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    for field, value in changes.items():
        setattr(current_user, field, value)
    db.commit()
    db.refresh(current_user)

    write_log(db, actor=current_user.teacher_id, action="PROFILE_UPDATE", resource="user",
              ip=client_ip(request), meta={"fields": sorted(changes)})
    return current_user


@router.put("/me/password")
def change_password(
    payload: PasswordChange,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    enforce(current_user, Action.USER_UPDATE_SELF)

    if not verify_password(payload.old_password, current_user.password_hash):
        write_log(db, actor=current_user.teacher_id, action="PASSWORD_CHANGE", resource="user",
                  status="FAIL", ip=client_ip(request))
        raise AuthenticationError("Old password incorrect")

    current_user.password_hash = get_password_hash(payload.new_password)
    db.commit()

    write_log(db, actor=current_user.teacher_id, action="PASSWORD_CHANGE", resource="user",
              ip=client_ip(request))
    return {"success": True}


# Create a faculty account (Admin only)
@router.post("", response_model=UserResponse, status_code=201)
def create_user(
    payload: UserCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    enforce(current_user, Action.USER_CREATE)

    if db.query(User).filter(User.teacher_id == payload.teacher_id).first():
        raise ConflictError(f"Teacher id '{payload.teacher_id}' already exists")

    new_user = User(
        teacher_id=payload.teacher_id,
        name=payload.name,
        phone=payload.phone,
        designation=payload.designation,
        role=payload.role,
        password_hash=get_password_hash(payload.password),
    )
    db.add(new_user)
    # The unique index catches a concurrent insert of the same teacher id
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(f"Teacher id '{payload.teacher_id}' already exists")
    db.refresh(new_user)

    logger.info("User %s created by %s with role %s", new_user.teacher_id, current_user.teacher_id, new_user.role)
    write_log(db, actor=current_user.teacher_id, action="USER_CREATE", resource="user",
              ip=client_ip(request), meta={"teacher_id": new_user.teacher_id, "role": new_user.role})
    return new_user


# Update user role (Admin only); promotion to admin demotes every HOD
@router.put("/{teacher_id}/role", response_model=UserResponse)
def update_user_role(
    teacher_id: str,
    new_role: RoleUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    change = set_user_role(db, teacher_id, new_role.role.strip().lower(), current_user)

    write_log(db, actor=current_user.teacher_id, action="ROLE_CHANGE", resource="user",
              ip=client_ip(request),
              meta={"teacher_id": teacher_id, "from": change.previous_role, "to": change.user.role})
    if change.demoted:
        write_log(db, actor=current_user.teacher_id, action="ROLE_CASCADE", resource="user",
                  ip=client_ip(request), meta={"promoted": teacher_id, "demoted": change.demoted})

    return change.user
