from pydantic import BaseModel, ConfigDict, Field, field_validator

from reva.core.security import validate_password_strength


class UserCreate(BaseModel):
    username: str = Field(..., min_length=3, max_length=30, pattern=r"^[a-zA-Z0-9_-]+$")
    password: str

    @field_validator("password")
    @classmethod
    def password_policy(cls, v: str) -> str:
        validate_password_strength(v)
        return v


class UserLogin(BaseModel):
    username: str
    password: str


class UserResponse(BaseModel):
    id: int
    username: str

    model_config = ConfigDict(from_attributes=True)


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
