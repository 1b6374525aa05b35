# spendwise/schemas/user.py
from pydantic import BaseModel

from spendwise.core.auth import UserRead

class SignupResponse(BaseModel):
    message: str
    user: UserRead
