"""
Acting user as seen by the service layer
"""
from typing import Optional
from uuid import UUID

from pydantic import BaseModel

from app.models.user import PlatformRole


class Actor(BaseModel):
    """Authenticated (or anonymous) caller of a service operation"""
    id: Optional[UUID] = None
    role: PlatformRole = PlatformRole.USER
    name: Optional[str] = None
    authenticated: bool = False

    @property
    def is_admin(self) -> bool:
        return self.authenticated and self.role == PlatformRole.ADMIN

    @classmethod
    def from_user(cls, user) -> "Actor":
        return cls(
            id=user.id,
            role=user.role,
            name=user.display_name,
            authenticated=True,
        )

    @classmethod
    def anonymous(cls) -> "Actor":
        return cls()
