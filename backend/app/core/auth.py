from datetime import UTC, datetime, timedelta
from uuid import UUID

import jwt
from fastapi import Depends, HTTPException, Request

from app.core.config import settings
from app.models.shared import DEFAULT_GYM_ID
from app.services.billing_scheduler import OperatorRole, OperatorSession

SESSION_TOKEN_TYPE = "operator_session"


def create_session_token(gym_id: UUID, operator_id: str, role: OperatorRole) -> str:
    """Issue a signed operator session token."""
    now = datetime.now(UTC)
    payload = {
        "type": SESSION_TOKEN_TYPE,
        "gym_id": str(gym_id),
        "operator_id": operator_id,
        "role": role.value,
        "iat": now,
        "exp": now + timedelta(minutes=settings.SESSION_TOKEN_TTL_MINUTES),
    }
    return jwt.encode(payload, settings.SESSION_JWT_SECRET, algorithm="HS256")


def verify_session_token(token: str) -> OperatorSession:
    """Decode and validate an operator session token.

    Raises jwt.ExpiredSignatureError or jwt.InvalidTokenError on failure.
    """
    payload = jwt.decode(token, settings.SESSION_JWT_SECRET, algorithms=["HS256"])
    if payload.get("type") != SESSION_TOKEN_TYPE:
        raise jwt.InvalidTokenError("Invalid token type")
    return OperatorSession(
        gym_id=UUID(payload["gym_id"]),
        operator_id=str(payload["operator_id"]),
        role=OperatorRole(payload["role"]),
    )


def _bearer_session(request: Request) -> OperatorSession | None:
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        return None
    if not auth_header.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Invalid authorization header format")
    token = auth_header[7:]
    if not token:
        raise HTTPException(status_code=401, detail="Session token is required")
    try:
        return verify_session_token(token)
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Session token has expired") from None
    except (jwt.InvalidTokenError, KeyError, ValueError):
        raise HTTPException(status_code=401, detail="Invalid session token") from None


def get_current_gym(request: Request) -> UUID:
    """Resolve the tenant from the session token or the ``X-Gym-Id`` header.

    Falls back to the default gym when neither is present.
    """
    session = _bearer_session(request)
    if session is not None:
        return session.gym_id

    gym_header = request.headers.get("X-Gym-Id")
    if gym_header:
        try:
            return UUID(gym_header)
        except ValueError:
            raise HTTPException(status_code=400, detail="Invalid X-Gym-Id header") from None
    return DEFAULT_GYM_ID


def get_current_operator(
    request: Request,
    gym_id: UUID = Depends(get_current_gym),
) -> OperatorSession:
    """Resolve who is acting, used to stamp manual charges and settlements."""
    session = _bearer_session(request)
    if session is not None:
        return session

    role_header = request.headers.get("X-Operator-Role", OperatorRole.STAFF.value)
    try:
        role = OperatorRole(role_header)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid X-Operator-Role header") from None
    return OperatorSession(
        gym_id=gym_id,
        operator_id=request.headers.get("X-Operator-Id", "anonymous"),
        role=role,
    )
