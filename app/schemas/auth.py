from pydantic import BaseModel, EmailStr
from typing import Optional

from app.schemas.user import UserRead


# -------------------------------------------------------------------
# LOGIN REQUEST
# -------------------------------------------------------------------
class LoginRequest(BaseModel):
    email: EmailStr
    password: str

    class Config:
        json_schema_extra = {
            "examples": [
                {"email": "admin@example.com", "password": "password123"}
            ]
        }


# -------------------------------------------------------------------
# TOKEN + USER DETAILS (Used for login response)
# -------------------------------------------------------------------
class TokenWithUser(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: Optional[int] = None
    user: UserRead

    # True for accounts created on admission approval until the
    # placeholder password is changed
    must_reset_password: bool = False


# -------------------------------------------------------------------
# CHANGE PASSWORD
# -------------------------------------------------------------------
class ChangePasswordRequest(BaseModel):
    old_password: str
    new_password: str
