from pydantic import BaseModel, EmailStr, Field, field_validator

from schoolhub.models.user import UserRole


class UserOut(BaseModel):
    id: str
    name: str
    email: EmailStr
    role: UserRole
    branch_id: str | None = None
    is_active: bool

    model_config = {"from_attributes": True}


class UserLogin(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8, max_length=128)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserOut
