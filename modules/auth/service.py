from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from datetime import datetime, timedelta
from typing import Optional, Tuple, Union
from jose import jwt
import logging

from config.settings import settings
from database.base import transaction
from modules.users.models import Admin, Customer, UserRole
from modules.auth.schemas import RegisterRequest, LoginRequest, AccountProfile
from shared.utils import hash_password, verify_password
from shared.exceptions import UnauthorizedException, ConflictException, ErrorCode

logger = logging.getLogger(__name__)

Account = Union[Customer, Admin]


class AuthService:
    def __init__(self, db: Session):
        self.db = db

    def register(self, data: RegisterRequest) -> Customer:
        """
        Register a new customer account.

        Email and username are checked up front; the unique constraints catch a
        concurrent registration that slips past the check.
        """
        conflict = self._taken(data)
        if conflict:
            raise conflict

        customer = Customer(
            name=data.name,
            email=data.email,
            phone=data.phone,
            username=data.username,
            password_hash=hash_password(data.password),
        )

        with transaction(self.db):
            self.db.add(customer)
            try:
                self.db.flush()
            except IntegrityError:
                self.db.rollback()
                logger.warning(f"⚠️ Concurrent registration for {data.username} / {data.email} lost the race")
                raise self._taken(data) or ConflictException("Account already exists", ErrorCode.USERNAME_TAKEN)

        self.db.refresh(customer)
        logger.info(f"✅ Customer registered: {customer.username} (ID: {customer.id})")
        return customer

    def _taken(self, data: RegisterRequest) -> Optional[ConflictException]:
        # Check if email already exists
        if self.db.query(Customer).filter(Customer.email == data.email).first():
            return ConflictException("Email already registered", ErrorCode.EMAIL_TAKEN)

        # Check if username already exists
        if self.db.query(Customer).filter(Customer.username == data.username).first():
            return ConflictException("Username already taken", ErrorCode.USERNAME_TAKEN)
        return None

    def login(self, data: LoginRequest) -> Tuple[Account, str]:
        """
        Authenticate a customer or admin and return (account, access_token).
        """
        model = Admin if data.role == UserRole.ADMIN else Customer
        account = self.db.query(model).filter(
            (model.email == data.identifier) | (model.username == data.identifier)
        ).first()

        if not account or not verify_password(data.password, account.password_hash):
            logger.warning(f"⚠️ Failed {data.role.value} login for identifier: {data.identifier}")
            raise UnauthorizedException("Invalid username or password", ErrorCode.INVALID_CREDENTIALS)

        access_token = self.create_access_token(account.id, data.role)
        logger.info(f"✅ {data.role.value.capitalize()} logged in: {account.username}")
        return account, access_token

    @staticmethod
    def create_access_token(account_id: int, role: UserRole) -> str:
        """
        Create JWT access token.
        """
        expire = datetime.utcnow() + timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES)

        payload = {
            "sub": str(account_id),
            "role": role.value,
            "type": "access",
            "exp": expire,
            "iat": datetime.utcnow(),
        }

        return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)

    @staticmethod
    def get_profile(account: Account, role: UserRole) -> AccountProfile:
        return AccountProfile(
            id=account.id,
            username=account.username,
            email=account.email,
            name=getattr(account, "name", None),
            role=role.value,
        )
