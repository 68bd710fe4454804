from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

from app.domain.entities import Role


class RegisteredOut(BaseModel):
    status: Literal["created"] = "created"
    email: str = Field(..., description="The email of the user")


class AuthOut(BaseModel):
    access_token: str
    refresh_token: str
    email: str
    user_id: str
    role: Role


class OkOut(BaseModel):
    status: Literal["ok"] = "ok"


class ResetCodeOut(BaseModel):
    status: Literal["sent"] = "sent"
    # only populated when the deployment exposes codes (dev/test)
    code: Optional[str] = None


class MeOut(BaseModel):
    id: str
    email: str
    roles: list[Role]


class UploadUrlOut(BaseModel):
    put_url: str
    key: str
    public_url: str


class ApiErrorOut(BaseModel):
    timestamp: datetime
    status: int
    code: str
    message: str
