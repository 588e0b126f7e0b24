from fastapi import APIRouter
from pydantic import BaseModel
from typing import List, Optional
from itimock.core.auth import create_token

router = APIRouter()

class MockLogin(BaseModel):
    user_id: str
    roles: List[str]
    user_name: Optional[str] = None

@router.post("/mock-login")
def mock_login(payload: MockLogin):
    token = create_token(payload.user_id, payload.roles, name=payload.user_name)
    return {"access_token": token, "token_type": "bearer", "roles": payload.roles}
