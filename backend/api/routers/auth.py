"""Authentication router"""
from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException, status, Request

from api.schemas.auth import UserRegister, UserLogin, Token, TokenData, SessionResponse, SessionUser
from api.dependencies import get_user_repository
from api.utils.auth import hash_password, verify_password, create_access_token, get_current_user
from api.utils.exceptions import AlreadyExistsException, UnauthorizedException
from api.config import settings
from api.ratelimit import limiter, LOGIN_LIMIT, REGISTER_LIMIT
from tradejournal.db.repositories import UserRepository
from tradejournal.utils.errors import DuplicateRecordError

router = APIRouter(prefix="/auth", tags=["authentication"])


def _issue_token(user) -> Token:
    access_token_expires = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    access_token = create_access_token(
        data={"sub": user.email, "user_id": user.id},
        expires_delta=access_token_expires
    )
    return Token(access_token=access_token, token_type="bearer")


@router.post("/register", response_model=Token, status_code=status.HTTP_201_CREATED)
@limiter.limit(REGISTER_LIMIT)
async def register(
    request: Request,
    user_data: UserRegister,
    users: UserRepository = Depends(get_user_repository),
):
    """Register a new user and return access token"""
    try:
        new_user = users.create(email=user_data.email, password_hash=hash_password(user_data.password))
    except DuplicateRecordError as e:
        raise AlreadyExistsException(e.message)

    users.db.commit()
    return _issue_token(new_user)


@router.post("/login", response_model=Token)
@limiter.limit(LOGIN_LIMIT)
async def login(
    request: Request,
    credentials: UserLogin,
    users: UserRepository = Depends(get_user_repository),
):
    """Login and get access token"""
    user = users.get_by_email(credentials.email)

    if not user or not verify_password(credentials.password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    users.touch_login(user)
    users.db.commit()
    return _issue_token(user)


@router.post("/logout")
async def logout(current_user: TokenData = Depends(get_current_user)):
    """Logout (client should discard token)"""
    return {"message": "Successfully logged out"}


@router.get("/session", response_model=SessionResponse)
async def get_session(
    current_user: TokenData = Depends(get_current_user),
    users: UserRepository = Depends(get_user_repository),
):
    """Current user and token expiry for a valid bearer token"""
    user = users.get_by_id(current_user.user_id)
    if not user:
        raise UnauthorizedException("User no longer exists")

    return SessionResponse(
        user=SessionUser(id=user.id, email=user.email),
        expires_at=current_user.expires_at,
    )
