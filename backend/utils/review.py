"""Achievement review state machine.

Under Review is the only non-terminal state. A review moves it, exactly once,
to Approved or Rejected; any later review of the same record is a conflict.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models.achievement import Achievement, AchievementStatus
from models.users import User
from utils.exceptions import ConflictError, NotFoundError, ValidationError
from utils.policy import Action, enforce

logger = logging.getLogger(__name__)

REVIEW_OUTCOMES = (AchievementStatus.APPROVED, AchievementStatus.REJECTED)


def _parse_outcome(target_status) -> AchievementStatus:
    try:
        outcome = AchievementStatus(target_status)
    except ValueError:
        outcome = None
    if outcome not in REVIEW_OUTCOMES:
        allowed = ", ".join(s.value for s in REVIEW_OUTCOMES)
        raise ValidationError(fields={"status": f"Status must be one of: {allowed}"})
    return outcome


def review_achievement(
    db: Session,
    achievement_id: int,
    target_status,
    reviewer: User,
    comment: Optional[str] = None,
) -> Achievement:
    """Approve or reject an achievement that is still under review.

    Args:
        db: Request-scoped session.
        achievement_id: Achievement to review.
        target_status: "Approved" or "Rejected".
        reviewer: Authenticated caller; must be an HOD or admin.
        comment: Optional note stored with the review.

    Returns:
        The reviewed achievement.

    Raises:
        AuthorizationError: Reviewer's role may not review.
        ValidationError: Target status is not a review outcome.
        NotFoundError: No achievement with this id.
        ConflictError: The achievement was already reviewed.
    """
    enforce(reviewer, Action.ACHIEVEMENT_REVIEW)
    outcome = _parse_outcome(target_status)

    # Compare-and-set on status so only one reviewer can win
    try:
        updated = (
            db.query(Achievement)
            .filter(
                Achievement.id == achievement_id,
                Achievement.status == AchievementStatus.UNDER_REVIEW.value,
            )
            .update(
                {
                    Achievement.status: outcome.value,
                    Achievement.reviewed_at: datetime.now(timezone.utc),
                    Achievement.reviewed_by: reviewer.teacher_id,
                    Achievement.review_comment: comment,
                },
                synchronize_session=False,
            )
        )
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    achievement = db.query(Achievement).filter(Achievement.id == achievement_id).first()
    if achievement is None:
        raise NotFoundError("Achievement", achievement_id)
    if not updated:
        raise ConflictError(
            f"Achievement {achievement_id} has already been reviewed ({achievement.status})"
        )

    logger.info(
        "Achievement %s %s by %s", achievement_id, outcome.value, reviewer.teacher_id
    )
    return achievement
