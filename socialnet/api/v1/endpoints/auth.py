"""Authentication endpoints."""

from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from socialnet.api.deps import get_current_active_user, get_db
from socialnet.models.user import User
from socialnet.schemas.user import TokenResponse, UserCreate, UserLogin, UserResponse
from socialnet.services.user_service import user_service

router = APIRouter(
    prefix="/auth",
    tags=["Authentication"],
)


@router.post(
    "/register",
    response_model=dict,
    status_code=status.HTTP_201_CREATED,
    summary="Register new user",
)
def register(
    user_in: UserCreate,
    db: Session = Depends(get_db),
) -> dict:
    """
    Register a new user and return an access token.

    Raises:
        409 if username, email or phone number is already registered
    """
    user = user_service.register(db, user_in)
    _, access_token = user_service.login(db, identifier=user.username, password=user_in.password)

    return {
        "user": UserResponse(**user_service.get_profile(db, user.id)),
        "access_token": access_token,
        "token_type": "bearer",
    }


@router.post(
    "/login",
    response_model=TokenResponse,
    status_code=status.HTTP_200_OK,
    summary="Login user",
)
def login(
    credentials: UserLogin,
    db: Session = Depends(get_db),
) -> TokenResponse:
    """Login with username or email and password."""
    user, access_token = user_service.login(
        db, identifier=credentials.identifier, password=credentials.password
    )
    return TokenResponse(access_token=access_token, user_id=user.id)


@router.post(
    "/token",
    response_model=TokenResponse,
    summary="OAuth2 token (form)",
    description="OAuth2 compatible form login used by the interactive docs. `username` accepts a username or email.",
)
def login_form(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db),
) -> TokenResponse:
    user, access_token = user_service.login(
        db, identifier=form_data.username, password=form_data.password
    )
    return TokenResponse(access_token=access_token, user_id=user.id)


@router.get(
    "/me",
    response_model=UserResponse,
    summary="Get current user",
)
def get_me(
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
) -> UserResponse:
    return UserResponse(**user_service.get_profile(db, current_user.id))
