from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.security import create_access_token
from app.db.models import User
from app.db.session import get_db
from app.schemas.auth import LoginRequest, RegisterRequest, TokenResponse, UserResponse
from app.services import users

router = APIRouter(prefix="/auth", tags=["auth"])


def issue_token(user: User) -> TokenResponse:
    token = create_access_token(subject=user.id, email=user.email, name=user.name)
    return TokenResponse(access_token=token, user=UserResponse.model_validate(user))


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def register(payload: RegisterRequest, db: Session = Depends(get_db)):
    user = users.create_user(db, email=payload.email, password=payload.password, name=payload.name)
    return issue_token(user)


@router.post("/login", response_model=TokenResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    user = users.authenticate(db, email=payload.email, password=payload.password)
    return issue_token(user)
