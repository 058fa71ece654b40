"""Caller identity for API requests.

Sessions are issued by an upstream gateway, which forwards the caller as
``X-User-Id`` and ``X-User-Role`` headers.
"""

from fastapi import Depends, Header, HTTPException

from marketplace.access import Actor, Role


def current_actor(
    x_user_id: str | None = Header(default=None),
    x_user_role: str | None = Header(default=None),
) -> Actor:
    if not x_user_id or not x_user_role:
        raise HTTPException(status_code=401, detail="Not authenticated")

    try:
        role = Role(x_user_role.lower())
    except ValueError:
        raise HTTPException(status_code=403, detail="Unknown role") from None

    return Actor(id=x_user_id, role=role)


def requires(*roles: Role):
    """Dependency admitting only callers holding one of ``roles``."""

    def dependency(actor: Actor = Depends(current_actor)) -> Actor:
        return actor.require(*roles)

    return dependency


customer = requires(Role.CUSTOMER)
vendor = requires(Role.VENDOR)
admin = requires(Role.ADMIN)
vendor_or_admin = requires(Role.VENDOR, Role.ADMIN)
