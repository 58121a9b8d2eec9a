from pydantic import BaseModel, EmailStr, Field


class SignupRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6)
    name: str = Field(min_length=2, max_length=100)


class LoginRequest(BaseModel):
    email: str
    password: str = Field(min_length=1)


class AppUserResponse(BaseModel):
    id: str
    email: str
    display_name: str
