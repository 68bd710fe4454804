from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from app.domain.entities import Role


class RegisterIn(BaseModel):
    email: EmailStr = Field(..., description="The email of the user", max_length=255)
    password: str = Field(..., description="The password of the user", min_length=4)
    role: Optional[Role] = Field(None, description="Defaults to USER")


class LoginIn(BaseModel):
    email: EmailStr = Field(..., max_length=255)
    password: str = Field(..., min_length=1)


class RefreshIn(BaseModel):
    refresh_token: str = Field(..., min_length=1)


class ForgotPasswordIn(BaseModel):
    email: EmailStr = Field(..., max_length=255)


class ResetPasswordIn(BaseModel):
    email: EmailStr = Field(..., max_length=255)
    code: str = Field(..., min_length=6, max_length=6, pattern=r"^\d{6}$")
    new_password: str = Field(..., min_length=4)


class AvatarUploadUrlIn(BaseModel):
    content_type: str = Field(..., description="image/png, image/jpeg or image/webp")
    content_length: int = Field(..., gt=0, description="File size in bytes (max 5MB)")


class AvatarCommitIn(BaseModel):
    key: str = Field(..., min_length=1)
    etag: str = Field(..., min_length=1)
