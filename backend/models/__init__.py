from models.users import User, UserRole  # noqa: F401
from models.achievement import Achievement, AchievementStatus  # noqa: F401
from models.log import Log  # noqa: F401
