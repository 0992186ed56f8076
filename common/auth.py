"""Password hashing, JWT handling, and credential checks for each account type."""
from datetime import datetime, timedelta
from typing import Any, Dict, Optional, Type, TypeVar, Union

from fastapi import HTTPException, status
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from .config import get_settings
from .models import Admin, Cook, RoleEnum, User

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
settings = get_settings()

Account = TypeVar("Account", Admin, Cook, User)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def create_session_token(account_id: int, role: Union[RoleEnum, str]) -> str:
    """Issue the opaque session token a client sends back in the ``token`` header."""

    return create_access_token({"sub": str(account_id), "role": RoleEnum(role).value})


def decode_token(token: str) -> Dict[str, Any]:
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError as exc:  # pragma: no cover - jose already tested
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token") from exc


def authenticate(db: Session, model: Type[Account], email: str, password: str) -> Optional[Account]:
    account = db.query(model).filter(model.email == email).first()
    if not account or not verify_password(password, account.hashed_password):
        return None
    return account


def ensure_bootstrap_admin(db: Session) -> Optional[Admin]:
    """Create the configured admin account if it does not exist yet."""

    if not settings.admin_email or not settings.admin_password:
        return None
    admin = db.query(Admin).filter(Admin.email == settings.admin_email).first()
    if admin:
        return admin
    admin = Admin(email=settings.admin_email, hashed_password=get_password_hash(settings.admin_password))
    db.add(admin)
    db.commit()
    db.refresh(admin)
    return admin
