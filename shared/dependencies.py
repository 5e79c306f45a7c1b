from dataclasses import dataclass
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from jose import JWTError, jwt

from database.base import get_db
from config.settings import settings
from modules.users.models import Admin, Customer, UserRole
from shared.exceptions import UnauthorizedException, ForbiddenException, ErrorCode

security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class CurrentUser:
    id: int
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def actor(self) -> str:
        """Audit label stored with status changes, e.g. customer:12"""
        return f"{self.role.value}:{self.id}"


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db)
) -> CurrentUser:
    """Get current authenticated account from JWT token"""
    credentials_exception = UnauthorizedException("Could not validate credentials")

    if not credentials:
        raise credentials_exception

    try:
        payload = jwt.decode(
            credentials.credentials,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM]
        )

        # Check token type
        if payload.get("type") != "access":
            raise credentials_exception

        account_id = payload.get("sub")
        role = UserRole(payload.get("role"))
        if account_id is None:
            raise credentials_exception
        account_id = int(account_id)
    except (JWTError, ValueError):
        raise credentials_exception

    model = Admin if role == UserRole.ADMIN else Customer
    if db.get(model, account_id) is None:
        raise credentials_exception

    return CurrentUser(id=account_id, role=role)


def get_admin_user(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    """Require admin role"""
    if not current_user.is_admin:
        raise ForbiddenException("Admin access required", ErrorCode.ACCESS_DENIED)
    return current_user


def ensure_owner_or_admin(current_user: CurrentUser, customer_id: int) -> None:
    """Customers may only act on their own bookings and payments."""
    if current_user.is_admin:
        return
    if current_user.id != customer_id:
        raise ForbiddenException("Access denied", ErrorCode.ACCESS_DENIED)
