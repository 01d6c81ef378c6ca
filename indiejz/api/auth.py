import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlmodel import Session, select

from indiejz.api.deps import get_current_user
from indiejz.core.database import get_db
from indiejz.core.rate_limit import auth_limit, limiter, register_limit
from indiejz.core.security import create_access_token, hash_password, verify_password
from indiejz.models import User
from indiejz.schemas import Token, UserCreate, UserLogin, UserResponse

router = APIRouter(prefix="/auth", tags=["auth"])
log = logging.getLogger("indiejz")


def _user_response(user: User) -> UserResponse:
    return UserResponse(id=user.id or 0, email=user.email, full_name=user.full_name or "")


@router.post("/register", response_model=UserResponse, status_code=201)
@limiter.limit(register_limit)
def register(request: Request, body: UserCreate, db: Session = Depends(get_db)):
    email = body.email.strip().lower()
    if db.exec(select(User).where(User.email == email)).first():
        raise HTTPException(status_code=400, detail="Este e-mail já está cadastrado.")
    user = User(
        email=email,
        hashed_password=hash_password(body.password),
        full_name=(body.full_name or "").strip(),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    log.info("User registered: user_id=%s", user.id)
    return _user_response(user)


@router.post("/login", response_model=Token)
@limiter.limit(auth_limit)
def login(request: Request, body: UserLogin, db: Session = Depends(get_db)):
    user = db.exec(select(User).where(User.email == body.email.strip().lower())).first()
    if not user or not verify_password(body.password, user.hashed_password):
        raise HTTPException(status_code=401, detail="E-mail ou senha incorretos.")
    return Token(access_token=create_access_token({"sub": str(user.id)}))


@router.get("/me", response_model=UserResponse)
def me(user: User = Depends(get_current_user)):
    return _user_response(user)
