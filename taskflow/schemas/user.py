from datetime import datetime
from pydantic import BaseModel, ConfigDict, EmailStr
from pydantic.alias_generators import to_camel


class UserCreate(BaseModel):
    email: EmailStr
    password: str


class UserLogin(BaseModel):
    email: str
    password: str


class UserOut(BaseModel):
    # NOT the password hash
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: str
    email: str
    created_at: datetime
    updated_at: datetime


class AuthResponse(BaseModel):
    user: UserOut
    token: str
