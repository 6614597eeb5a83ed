"""
Pydantic schemas for authentication endpoints.
"""
from typing import Optional
from pydantic import BaseModel, EmailStr, Field, field_validator


class SignupRequest(BaseModel):
    """Request schema for user signup."""
    name: str = Field(..., min_length=1, max_length=100, description="User's full name")
    email: EmailStr = Field(..., description="User's email address")
    password: str = Field(..., min_length=6, description="User's password (min 6 characters)")
    role: str = Field("applicant", pattern="^(hr|applicant)$")
    company: Optional[str] = Field(None, description="Company, for recruiter accounts")

    @field_validator("password")
    @classmethod
    def validate_password_length(cls, v: str) -> str:
        """bcrypt only looks at the first 72 bytes."""
        if len(v.encode("utf-8")) > 72:
            raise ValueError("Password too long (bcrypt limit 72 bytes)")
        return v

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Ada Lovelace",
                "email": "ada@example.com",
                "password": "SecurePass123",
                "role": "applicant"
            }
        }


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
