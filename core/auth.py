from datetime import datetime, timedelta
from typing import Optional
from jose import JWTError, jwt
from fastapi import HTTPException, status, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from core.config import settings
from core.exceptions import ForbiddenError
from core.roles import UserRole
from api.deps.db import get_db
from api.crud.user import get_user_by_id
from models.user import User
from schemas.auth import TokenData

security = HTTPBearer(auto_error=False)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(minutes=settings.jwt_expire_minutes)

    # "sub" must be a string for jose
    if "sub" in to_encode:
        to_encode["sub"] = str(to_encode["sub"])
    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)
    return encoded_jwt


def verify_token(token: str) -> Optional[TokenData]:
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None
    subject = payload.get("sub")
    try:
        user_id = int(subject)
    except (TypeError, ValueError):
        return None
    if user_id <= 0:
        return None
    return TokenData(user_id=user_id)


def decode_user_id(token: str) -> Optional[int]:
    """Opaque user id carried by the token, or None."""
    token_data = verify_token(token)
    return token_data.user_id if token_data else None


def get_current_user_id(credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)) -> int:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if credentials is None:
        raise credentials_exception

    user_id = decode_user_id(credentials.credentials)
    if user_id is None:
        raise credentials_exception
    return user_id


def require_role(required_role: UserRole):
    """
    Dependency factory checking the caller's role.

    Uses the role hierarchy, so higher roles pass checks for lower ones:

    @router.post("/admin-only")
    async def admin_endpoint(user: User = Depends(require_role(UserRole.ADMIN))):
        ...
    """
    def role_checker(user_id: int = Depends(get_current_user_id), db: Session = Depends(get_db)) -> User:
        user = get_user_by_id(db, user_id)
        if user is None or not user.is_active:
            raise ForbiddenError()
        if not UserRole.has_permission(user.role, required_role):
            raise ForbiddenError(f"Access denied. Required role: {required_role.value}")
        return user
    return role_checker


require_admin = require_role(UserRole.ADMIN)
