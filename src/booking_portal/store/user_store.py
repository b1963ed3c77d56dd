"""Customer directory consulted for identity and document contact details."""

import hmac
from pathlib import Path
from typing import Optional, Protocol

import yaml
from pydantic import BaseModel, Field

from booking_portal.models.profile import CustomerProfile


class PortalUser(BaseModel):
    """A portal customer. token is an opaque credential issued elsewhere."""

    id: str = Field(..., description="Stable user id")
    email: str = ""
    phone: str = ""
    name: str = "Customer"
    token: Optional[str] = Field(default=None, repr=False)

    def profile(self) -> CustomerProfile:
        return CustomerProfile(name=self.name, phone=self.phone, email=self.email)


class UserStore(Protocol):
    """Read-only user lookups needed by the portal."""

    def get_by_token(self, token: str) -> Optional[PortalUser]: ...


class InMemoryUserStore:
    """User store over a fixed list, typically loaded from YAML."""

    def __init__(self, users: Optional[list[PortalUser]] = None):
        self._users = list(users or [])

    @classmethod
    def from_yaml(cls, path: str | Path) -> "InMemoryUserStore":
        """Load users from YAML: either a top-level list or {users: [...]}."""
        data = yaml.safe_load(Path(path).read_text()) or []
        if isinstance(data, dict):
            data = data.get("users", [])
        users = []
        for i, entry in enumerate(data, 1):
            entry = dict(entry)
            entry.setdefault("id", str(i))
            entry["id"] = str(entry["id"])
            users.append(PortalUser.model_validate(entry))
        return cls(users)

    def get_by_token(self, token: str) -> Optional[PortalUser]:
        if not token:
            return None
        for user in self._users:
            if user.token and hmac.compare_digest(user.token.encode(), token.encode()):
                return user
        return None
