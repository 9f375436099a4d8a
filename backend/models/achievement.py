# backend/models/achievement.py
import enum
from sqlalchemy import Column, Integer, String, DateTime, Text, func
from database import Base

# Lifecycle of an achievement; APPROVED and REJECTED are terminal
class AchievementStatus(str, enum.Enum):
    UNDER_REVIEW = "Under Review"
    APPROVED = "Approved"
    REJECTED = "Rejected"

# A faculty accomplishment submitted for review
class Achievement(Base):
    __tablename__ = "achievements"

    id = Column(Integer, primary_key=True, index=True)

    # Weak reference to users.teacher_id, not an ownership pointer
    teacher_id = Column(String(32), nullable=False, index=True)

    academic_year = Column(String(16), nullable=False)
    certificate_year = Column(Integer, nullable=False, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    certificate_link = Column(String, nullable=False)

    status = Column(String(16), nullable=False, default=AchievementStatus.UNDER_REVIEW.value, index=True)
    submitted_at = Column(DateTime(timezone=True), server_default=func.now())

    # Filled in once, by the reviewing HOD or admin
    reviewed_at = Column(DateTime(timezone=True), nullable=True)
    reviewed_by = Column(String(32), nullable=True)
    review_comment = Column(Text, nullable=True)
