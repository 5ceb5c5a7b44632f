"""Staff/customer account payloads."""

from datetime import datetime

from pydantic import BaseModel

from agro_admin.api.schemas.product import RecordId

USER_ROLES: tuple[str, ...] = ("admin", "user", "moderator")


class UserRead(BaseModel):
    id: RecordId
    username: str
    email: str = ""
    role: str = "user"
    created_at: datetime | None = None
    last_login: datetime | None = None
