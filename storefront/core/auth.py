from dataclasses import dataclass
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
import jwt
from storefront.core.config import settings

security = HTTPBearer(auto_error=False)

ROLE_ADMIN = "admin"
ROLE_CUSTOMER = "customer"

@dataclass(frozen=True)
class Principal:
    sub: str   # user email, as issued by the auth service
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

def decode_principal(token: str) -> Principal:
    payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    if payload.get("type") != "access" or not payload.get("sub"):
        raise jwt.InvalidTokenError("not an access token")
    return Principal(sub=payload["sub"], role=payload.get("role") or ROLE_CUSTOMER)

def get_current_principal(creds: HTTPAuthorizationCredentials = Depends(security)) -> Principal:
    if not creds:
        raise HTTPException(status_code=401, detail="Not authenticated")
    try:
        return decode_principal(creds.credentials)
    except jwt.PyJWTError:
        raise HTTPException(status_code=401, detail="Invalid token")

def require_admin(principal: Principal = Depends(get_current_principal)) -> Principal:
    if not principal.is_admin:
        raise HTTPException(status_code=403, detail="Admin only")
    return principal
