from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from estatehub.core.database import get_db
from estatehub.core.exceptions import NotAuthorizedError, ValidationError
from estatehub.models.user import User
from estatehub.schemas.user import UserCreate, UserLogin, TokenResponse, UserEnvelope
from estatehub.utils.auth import get_password_hash, verify_password, create_access_token
from estatehub.api.deps import get_current_active_user

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _token_for(user: User) -> str:
    return create_access_token(data={"sub": str(user.id), "role": user.role.value})


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register(user_data: UserCreate, db: Session = Depends(get_db)):
    if db.query(User).filter(User.email == user_data.email.lower()).first():
        raise ValidationError("Email already registered")

    user = User(
        name=user_data.name,
        email=user_data.email.lower(),
        phone=user_data.phone,
        password_hash=get_password_hash(user_data.password),
        role=user_data.role,
        avatar=user_data.avatar,
    )

    db.add(user)
    db.commit()
    db.refresh(user)

    return {"success": True, "token": _token_for(user), "user": user}


@router.post("/login", response_model=TokenResponse)
async def login(user_data: UserLogin, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.email == user_data.email.lower()).first()

    if not user or not verify_password(user_data.password, user.password_hash):
        raise NotAuthorizedError("Incorrect email or password")

    if not user.is_active:
        raise ValidationError("Account is deactivated")

    return {"success": True, "token": _token_for(user), "user": user}


@router.get("/me", response_model=UserEnvelope)
async def get_current_user_info(
    current_user: User = Depends(get_current_active_user)
):
    return {"success": True, "user": current_user}
