"""Bootstrap the database.

Creates the tables and the first admin account (the only admin not produced
by promotion). With ``--demo`` it also adds a few faculty members and sample
achievements for local development.

Usage:
    ADMIN_PASSWORD=... python seed_db.py [--demo]
"""
import argparse
import logging
import os
import sys

# Add 'backend' folder to Python path
sys.path.append(os.path.abspath(os.path.dirname(__file__)))

from faker import Faker

from config import settings
from database import SessionLocal, init_db
from models.achievement import Achievement, AchievementStatus
from models.users import User, UserRole
from utils.hashing import get_password_hash
from utils.logging_config import setup_logging

logger = logging.getLogger("seed_db")

DEMO_PASSWORD = "password123"
DEMO_FACULTY = [
    ("H001", UserRole.HOD.value, "Professor & Head"),
    ("T001", UserRole.TEACHER.value, "Assistant Professor"),
    ("T002", UserRole.TEACHER.value, "Associate Professor"),
    ("T003", UserRole.TEACHER.value, "Assistant Professor"),
]


def ensure_admin(session) -> bool:
    """Create the bootstrap admin if missing. Returns True when created."""
    if session.query(User).filter(User.teacher_id == settings.ADMIN_TEACHER_ID).first():
        logger.info("Admin %s already exists", settings.ADMIN_TEACHER_ID)
        return False
    if not settings.ADMIN_PASSWORD:
        raise SystemExit("ADMIN_PASSWORD must be set to create the admin account")

    session.add(User(
        teacher_id=settings.ADMIN_TEACHER_ID,
        name=settings.ADMIN_NAME,
        role=UserRole.ADMIN.value,
        password_hash=get_password_hash(settings.ADMIN_PASSWORD),
    ))
    session.commit()
    logger.info("Created admin %s", settings.ADMIN_TEACHER_ID)
    return True


def load_demo_data(session, fake: Faker) -> None:
    password_hash = get_password_hash(DEMO_PASSWORD)
    for teacher_id, role, designation in DEMO_FACULTY:
        if session.query(User).filter(User.teacher_id == teacher_id).first():
            continue
        session.add(User(
            teacher_id=teacher_id,
            name=fake.name(),
            phone=fake.numerify("##########"),
            designation=designation,
            role=role,
            password_hash=password_hash,
        ))

        # One achievement in each state per teacher
        for status in AchievementStatus:
            year = fake.random_int(min=2018, max=2024)
            session.add(Achievement(
                teacher_id=teacher_id,
                academic_year=f"{year}-{year + 1}",
                certificate_year=year,
                title=fake.sentence(nb_words=5).rstrip("."),
                description=fake.paragraph(nb_sentences=2),
                certificate_link=f"https://drive.google.com/file/d/{fake.uuid4()}/view",
                status=status.value,
                reviewed_by="H001" if status != AchievementStatus.UNDER_REVIEW else None,
            ))
    session.commit()
    logger.info("Demo faculty loaded (password: %s)", DEMO_PASSWORD)


def main(argv=None):
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--demo", action="store_true", help="also load demo faculty and achievements")
    args = parser.parse_args(argv)

    setup_logging()
    init_db()
    session = SessionLocal()
    try:
        ensure_admin(session)
        if args.demo:
            load_demo_data(session, Faker())
    finally:
        session.close()


if __name__ == "__main__":
    main()
