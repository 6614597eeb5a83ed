import logging
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from ats_portal.core.auth_dependency import get_db
from ats_portal.core.logging_config import sanitize_log_data
from ats_portal.core.security import hash_password, verify_password, create_access_token
from ats_portal.db.models.user import User
from ats_portal.schemas.auth import SignupRequest, TokenResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/signup", status_code=status.HTTP_201_CREATED)
def signup(request: SignupRequest, db: Session = Depends(get_db)):
    logger.info(f"Signup request: {sanitize_log_data(request.model_dump())}")
    email = request.email.lower()
    if db.query(User).filter(User.email == email).first():
        raise HTTPException(status_code=400, detail="Email already registered")

    user = User(
        name=request.name,
        email=email,
        password_hash=hash_password(request.password),
        role=request.role,
        company=request.company,
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    logger.info(f"User created: user_id={user.id}, role={user.role}")
    return {
        "message": "User created successfully",
        "user_id": user.id
    }


@router.post("/login", response_model=TokenResponse)
def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db)
):
    # OAuth2 form sends "username"; we treat it as email
    user = db.query(User).filter(User.email == form_data.username.lower()).first()

    if not user or not user.is_active or not verify_password(form_data.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid credentials")

    return TokenResponse(access_token=create_access_token({"sub": user.email}))
