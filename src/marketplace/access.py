"""Who is calling, and what they may touch.

Session issuance happens elsewhere; by the time a request reaches this
context the caller has been authenticated and is described by an ``Actor``.
"""

from dataclasses import dataclass
from enum import Enum

from marketplace.errors import AccessDenied


class Role(Enum):
    CUSTOMER = "customer"
    VENDOR = "vendor"
    ADMIN = "admin"


@dataclass(frozen=True)
class Actor:
    id: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN

    def require(self, *roles: Role) -> "Actor":
        if self.role not in roles:
            raise AccessDenied("Forbidden")
        return self
