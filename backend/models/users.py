# backend/models/users.py
import enum
from sqlalchemy import Column, Integer, String, DateTime, func
from database import Base

# Roles known to the portal; "student" has no privileges beyond public reads
class UserRole(str, enum.Enum):
    TEACHER = "teacher"
    HOD = "hod"
    ADMIN = "admin"
    STUDENT = "student"

# Represents a faculty account keyed by its human-assigned teacher id (e.g. "T001")
class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    teacher_id = Column(String(32), unique=True, nullable=False, index=True)
    name = Column(String, nullable=False)
    phone = Column(String, nullable=True)
    designation = Column(String, nullable=True)
    role = Column(String(16), nullable=False, default=UserRole.TEACHER.value, index=True)
    password_hash = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
