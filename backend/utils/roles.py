"""Role promotion and demotion.

Teachers and HODs move laterally between the two roles. Promoting anyone to
admin first demotes every current HOD to teacher; the demotion and the
promotion commit together or not at all.
"""

import logging
from dataclasses import dataclass, field
from typing import List

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models.users import User, UserRole
from utils.exceptions import ConflictError, NotFoundError, PortalError, ValidationError
from utils.policy import Action, enforce

logger = logging.getLogger(__name__)

ASSIGNABLE_ROLES = (UserRole.TEACHER.value, UserRole.HOD.value, UserRole.ADMIN.value)

# Only these roles can be moved by set_user_role
MOVABLE_ROLES = (UserRole.TEACHER.value, UserRole.HOD.value)


@dataclass
class RoleChange:
    user: User
    previous_role: str
    demoted: List[str] = field(default_factory=list)


def _lock_rows(db: Session, teacher_id: str, promoting_to_admin: bool) -> List[User]:
    # One locking statement in id order so concurrent promotions queue instead of deadlocking
    criteria = User.teacher_id == teacher_id
    if promoting_to_admin:
        criteria = or_(criteria, User.role == UserRole.HOD.value)
    return db.query(User).filter(criteria).order_by(User.id).with_for_update().all()


def set_user_role(db: Session, teacher_id: str, new_role: str, caller: User) -> RoleChange:
    """Change a user's role, cascading HOD demotion on admin promotion.

    Raises:
        AuthorizationError: Caller is not an admin.
        ValidationError: ``new_role`` is not teacher, hod or admin.
        NotFoundError: No user with ``teacher_id``.
        ConflictError: Target is an admin or student.
    """
    enforce(caller, Action.USER_SET_ROLE)
    if new_role not in ASSIGNABLE_ROLES:
        raise ValidationError(fields={"role": f"Role must be one of: {', '.join(ASSIGNABLE_ROLES)}"})

    promoting_to_admin = new_role == UserRole.ADMIN.value

    try:
        rows = _lock_rows(db, teacher_id, promoting_to_admin)
        user = next((u for u in rows if u.teacher_id == teacher_id), None)
        if user is None:
            raise NotFoundError("User", teacher_id)
        if user.role not in MOVABLE_ROLES:
            raise ConflictError(f"Cannot change role of {user.role} '{teacher_id}'")

        change = RoleChange(user=user, previous_role=user.role)

        if promoting_to_admin:
            hod_ids = [u.id for u in rows if u.role == UserRole.HOD.value and u.id != user.id]
            if hod_ids:
                db.query(User).filter(User.id.in_(hod_ids)).update(
                    {User.role: UserRole.TEACHER.value}, synchronize_session=False
                )
                change.demoted = [u.teacher_id for u in rows if u.id in hod_ids]

        user.role = new_role
        db.commit()
    except (PortalError, SQLAlchemyError):
        # Releases the row locks; nothing from this call is persisted
        db.rollback()
        raise

    db.refresh(user)
    if change.demoted:
        logger.info("Promoted %s to admin, demoted HODs: %s", teacher_id, change.demoted)
    else:
        logger.info("Role of %s changed %s -> %s", teacher_id, change.previous_role, new_role)
    return change
