from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel, Field
from typing import Iterable, List, Optional
import jwt
from datetime import datetime, timedelta, timezone
from itimock.core.config import settings

ALGORITHM = "HS256"

# who may sit papers, and who may write into the question bank
TAKER_ROLES = ("student", "teacher", "admin")
AUTHOR_ROLES = ("author", "teacher", "admin")

class TokenData(BaseModel):
    sub: str
    roles: List[str] = Field(default_factory=list)
    name: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return "admin" in self.roles

    def has_any(self, roles: Iterable[str]) -> bool:
        return not set(self.roles).isdisjoint(roles)

bearer = HTTPBearer()

def create_token(user_id: str, roles: List[str], name: Optional[str] = None, ttl_minutes: Optional[int] = None) -> str:
    issued = datetime.now(timezone.utc)
    expires = issued + timedelta(minutes=ttl_minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    claims = {"sub": user_id, "roles": list(roles), "iat": issued, "exp": expires}
    if name:
        claims["name"] = name
    return jwt.encode(claims, settings.APP_SECRET, algorithm=ALGORITHM)

def decode_token(token: str) -> TokenData:
    """Verify signature and expiry; a token without a subject is rejected."""
    claims = jwt.decode(token, settings.APP_SECRET, algorithms=[ALGORITHM], options={"require": ["sub", "exp"]})
    return TokenData(sub=claims["sub"], roles=claims.get("roles") or [], name=claims.get("name"))

def get_current_user(creds: HTTPAuthorizationCredentials = Depends(bearer)) -> TokenData:
    try:
        return decode_token(creds.credentials)
    except jwt.PyJWTError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired token",
                            headers={"WWW-Authenticate": "Bearer"})

def require_roles(*required: str):
    allowed = frozenset(required)

    def checker(user: TokenData = Depends(get_current_user)) -> TokenData:
        if not user.has_any(allowed):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient role")
        return user
    return checker
