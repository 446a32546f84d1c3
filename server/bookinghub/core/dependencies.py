"""FastAPI dependencies for authentication and collaborator handles."""

from typing import Optional

import jwt
from fastapi import Depends, Header, Request
from jwt import PyJWTError

from ..integrations.notifications import CrmNotifier
from ..integrations.payments import PaymentGateway
from .config import settings
from .exceptions import AuthenticationError, AuthorizationError


async def get_current_user(
    authorization: Optional[str] = Header(None, alias="Authorization")
) -> dict:
    """
    Authentication dependency that validates Bearer tokens.

    Args:
        authorization: Authorization header with Bearer token

    Returns:
        dict: ``user_id``, ``full_name``, ``email`` and ``role`` from the token

    Raises:
        AuthenticationError: If token is invalid or missing
    """
    if not authorization:
        raise AuthenticationError("Missing or invalid authorization header")

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise AuthenticationError("Missing or invalid authorization header")

    try:
        payload = jwt.decode(token, settings.bearer_token_secret, algorithms=["HS256"])
    except PyJWTError as e:
        raise AuthenticationError(f"Invalid or expired token: {e}") from e

    user_id = payload.get("sub")
    if user_id is None:
        raise AuthenticationError("Invalid token payload")

    role = payload.get("role")
    if role is None:
        roles = payload.get("roles") or []
        role = roles[0] if roles else None

    return {
        "user_id": str(user_id),
        "full_name": payload.get("full_name") or payload.get("username"),
        "email": payload.get("email"),
        "role": role,
    }


def require_role(*allowed_roles: str):
    """Build a dependency that admits only users holding one of ``allowed_roles``."""

    async def dependency(user: dict = Depends(get_current_user)) -> dict:
        if user["role"] not in allowed_roles:
            raise AuthorizationError(required_roles=list(allowed_roles))
        return user

    return dependency


require_admin = require_role("admin")
require_contractor = require_role("contractor", "admin")


def get_payment_gateway(request: Request) -> PaymentGateway:
    """The process-wide payment gateway created by the lifespan."""
    return request.app.state.payment_gateway


def get_notifier(request: Request) -> CrmNotifier:
    """The process-wide CRM notifier created by the lifespan."""
    return request.app.state.notifier


RequiredAuth = Depends(get_current_user)
AdminAuth = Depends(require_admin)
ContractorAuth = Depends(require_contractor)
PaymentGatewayDependency = Depends(get_payment_gateway)
NotifierDependency = Depends(get_notifier)
