from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

Role = Literal["user", "vendor", "admin"]


class AuthUser(BaseModel):
    """
    Represents an authenticated caller, decoded from the bearer token.
    """

    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., alias="sub")
    email: Optional[str] = None
    role: Role = "user"

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"
