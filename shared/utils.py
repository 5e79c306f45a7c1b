import secrets
import string
from datetime import datetime
from typing import List, Optional
import bcrypt


def hash_password(password: str) -> str:
    """Hash a password using bcrypt"""
    return bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt()).decode('utf-8')


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a hash"""
    try:
        return bcrypt.checkpw(plain_password.encode('utf-8'), hashed_password.encode('utf-8'))
    except ValueError:
        return False


def generate_code(length: int = 8, uppercase: bool = True) -> str:
    """Generate a random alphanumeric code"""
    characters = string.ascii_uppercase + string.digits if uppercase else string.ascii_letters + string.digits
    return ''.join(secrets.choice(characters) for _ in range(length))


def generate_transaction_reference(prefix: str = "TXN") -> str:
    """Generate an external-looking transaction reference (e.g., TXN-20250301-4F7Q2KZ8)"""
    return f"{prefix}-{datetime.utcnow():%Y%m%d}-{generate_code(8)}"


def format_currency(amount, currency: str = "PKR") -> str:
    """Format currency amount"""
    return f"{amount:,.2f} {currency}"


def enum_value(enum_or_str) -> Optional[str]:
    """Plain string for an enum member (or a raw string column value)"""
    if enum_or_str is None:
        return None
    return enum_or_str.value if hasattr(enum_or_str, "value") else str(enum_or_str)


def enum_values(enum_cls) -> List[str]:
    """values_callable for SQLAlchemy Enum columns: store member values, not names"""
    return [member.value for member in enum_cls]
