from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

class LoginRequest(BaseModel):
    email: str

class VerifyCodeRequest(BaseModel):
    email: str
    code: str

class UsernameUpdateRequest(BaseModel):
    username: str = Field(default="", max_length=200)

class MessageResponse(BaseModel):
    message: str

class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True, extra="ignore")
    id: int
    email: str
    username: str
    school_domain: str
    coins: int = 0

class TokenResponse(BaseModel):
    user: UserResponse
    token: str
    message: Optional[str] = None
