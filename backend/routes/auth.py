# backend/routes/auth.py
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from utils.hashing import verify_password
from utils.tokenJWT import create_access_token, get_current_user
from utils.audit import client_ip, write_log
from utils.exceptions import AuthenticationError
from utils.policy import Action, enforce
from models.users import User
from schemas import user as schemas
from database import get_db

router = APIRouter(prefix="/auth", tags=["Auth"])


# Authenticate user and issue JWT token
@router.post("/login", response_model=schemas.LoginResponse)
def login(payload: schemas.UserLogin, request: Request, db: Session = Depends(get_db)):
    teacher_id = payload.teacher_id.strip()
    db_user = db.query(User).filter(User.teacher_id == teacher_id).first()

    # Validate credentials and log failure on error
    if not db_user or not verify_password(payload.password, db_user.password_hash):
        write_log(db, actor=(db_user.teacher_id if db_user else None), action="LOGIN", resource="auth",
                  status="FAIL", ip=client_ip(request), meta={"teacher_id": teacher_id})
        raise AuthenticationError("Invalid credentials")

    # Generate access token
    token = create_access_token(data={"sub": db_user.teacher_id, "role": db_user.role})

    # Log successful login event
    write_log(db, actor=db_user.teacher_id, action="LOGIN", resource="auth",
              status="SUCCESS", ip=client_ip(request))

    return {"user": db_user, "token": token, "token_type": "bearer"}


# Retrieve current authenticated user details
@router.get("/me", response_model=schemas.UserResponse)
def me(current_user: User = Depends(get_current_user)):
    enforce(current_user, Action.USER_READ_SELF)
    return current_user
