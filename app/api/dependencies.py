# ============================================================================
# FILE: app/api/dependencies.py
# Authentication and service dependencies for the HTTP layer
# ============================================================================
from fastapi import Depends, HTTPException, status, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from typing import Optional
from datetime import datetime, timedelta, timezone
from jose import JWTError, jwt
from uuid import UUID
import logging

from app.config.database import get_db
from app.config.settings import settings
from app.models.user import User
from app.schemas.actor import Actor
from app.services.notification.notification_service import NotificationService
from app.services.notification.publisher import NotificationPublisher

logger = logging.getLogger(__name__)

# ============================================================================
# Security Schemes
# ============================================================================

optional_jwt_security = HTTPBearer(
    scheme_name="JWT Bearer Token",
    description="Enter your JWT access token",
    auto_error=False
)


# ============================================================================
# JWT Token Functions
# ============================================================================

def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT access token.

    Args:
        data: Dictionary with claims (should include 'sub' with user_id)
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT token string
    """
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(
            minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES
        )

    to_encode.update({
        "exp": expire,
        "iat": datetime.now(timezone.utc),
        "type": "access"
    })

    return jwt.encode(
        to_encode,
        settings.JWT_SECRET_KEY,
        algorithm=settings.JWT_ALGORITHM
    )


def verify_access_token(token: str) -> dict:
    """
    Verify and decode a JWT access token.

    Raises:
        HTTPException: If token is invalid, expired or not an access token
    """
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM]
        )
    except JWTError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Could not validate credentials: {str(e)}",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if payload.get("type") != "access":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token type",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return payload


def _user_from_payload(db: Session, payload: dict) -> User:
    user_id_str: Optional[str] = payload.get("sub")
    if user_id_str is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        user_id = UUID(user_id_str)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid user ID in token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = db.query(User).filter(User.id == user_id).first()
    if user is None or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return user


# ============================================================================
# Authentication Dependencies
# ============================================================================

async def optional_current_user(
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(optional_jwt_security),
        db: Session = Depends(get_db)
) -> Optional[User]:
    """
    Returns User if a valid token is provided, None otherwise.
    Used by endpoints that anonymous visitors may also call.
    """
    if not credentials:
        return None

    try:
        payload = verify_access_token(credentials.credentials)
        return _user_from_payload(db, payload)
    except HTTPException as e:
        logger.debug(f"Ignoring invalid optional credentials: {e.detail}")
        return None


async def get_current_actor(
        user: Optional[User] = Depends(optional_current_user)
) -> Actor:
    """
    Acting user for the service layer. Missing credentials give an
    anonymous actor; the services decide whether that is allowed.
    """
    if user is None:
        return Actor.anonymous()
    return Actor.from_user(user)


# ============================================================================
# Notification Dependencies
# ============================================================================

def get_notification_publisher(request: Request) -> Optional[NotificationPublisher]:
    """Publisher opened by the application lifespan, if real-time is enabled"""
    return getattr(request.app.state, "notification_publisher", None)


def get_notification_service(
        db: Session = Depends(get_db),
        publisher: Optional[NotificationPublisher] = Depends(get_notification_publisher)
) -> NotificationService:
    return NotificationService(db, publisher=publisher)
