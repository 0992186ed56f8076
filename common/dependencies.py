"""Reusable FastAPI dependencies resolving the ``token`` header to an account."""
from typing import Any, Callable, Dict, Type

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import APIKeyHeader
from sqlalchemy.orm import Session

from .auth import decode_token
from .database import get_db
from .models import Admin, Cook, RoleEnum, User

token_header = APIKeyHeader(name="token", auto_error=False)

_ROLE_MODELS: Dict[RoleEnum, Type[Any]] = {
    RoleEnum.ADMIN: Admin,
    RoleEnum.COOK: Cook,
    RoleEnum.USER: User,
}


def get_token_payload(token: str | None = Security(token_header)) -> Dict[str, Any]:
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authorized, login again")
    payload = decode_token(token)
    if payload.get("sub") is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing subject in token")
    return payload


def require_role(role: RoleEnum) -> Callable[..., Any]:
    model = _ROLE_MODELS[role]

    def dependency(payload: Dict[str, Any] = Depends(get_token_payload), db: Session = Depends(get_db)) -> Any:
        if payload.get("role") != role.value:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")
        try:
            account_id = int(payload["sub"])
        except (TypeError, ValueError) as exc:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token") from exc
        account = db.get(model, account_id)
        if account is None:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Account not found")
        return account

    return dependency


get_current_admin = require_role(RoleEnum.ADMIN)
get_current_cook = require_role(RoleEnum.COOK)
get_current_user = require_role(RoleEnum.USER)
