"""Shared dependencies for API routers — auth, date parsing, reporting clock."""

import base64
import hashlib
import hmac
import json
import logging
import secrets
import time
from datetime import date
from typing import Optional

from fastapi import Header, HTTPException

from config.settings import settings
from loading_insights.discovery.reporting_window import reporting_today

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# JWT Configuration
# ---------------------------------------------------------------------------

JWT_SECRET = settings.jwt_secret
if not JWT_SECRET:
    JWT_SECRET = secrets.token_hex(32)
    logger.warning(
        "JWT_SECRET not set in environment — generated ephemeral secret. "
        "Tokens issued by the portal will not verify. Set JWT_SECRET in production."
    )
JWT_ALGORITHM = "HS256"


def _b64(data: dict) -> str:
    return base64.urlsafe_b64encode(json.dumps(data).encode()).decode().rstrip("=")


def create_jwt(user_id: str, username: str, is_admin: bool = False) -> str:
    """Create a signed token in the format the portal login service issues."""
    now = int(time.time())
    header = _b64({"alg": JWT_ALGORITHM, "typ": "JWT"})
    payload = _b64(
        {
            "sub": user_id,
            "username": username,
            "is_admin": is_admin,
            "iat": now,
            "exp": now + settings.jwt_expire_days * 86400,
        }
    )
    signature = hmac.new(
        JWT_SECRET.encode(), f"{header}.{payload}".encode(), hashlib.sha256
    ).hexdigest()
    return f"{header}.{payload}.{signature}"


def decode_jwt(token: str) -> Optional[dict]:
    """Decode and verify a token; None if malformed, tampered or expired."""
    parts = token.split(".")
    if len(parts) != 3:
        return None
    header, payload, signature = parts

    expected_sig = hmac.new(
        JWT_SECRET.encode(), f"{header}.{payload}".encode(), hashlib.sha256
    ).hexdigest()
    if not hmac.compare_digest(signature, expected_sig):
        return None

    try:
        payload += "=" * (-len(payload) % 4)
        data = json.loads(base64.urlsafe_b64decode(payload))
    except (ValueError, TypeError):
        return None

    if data.get("exp", 0) < int(time.time()):
        return None
    return data


# ---------------------------------------------------------------------------
# FastAPI Dependencies
# ---------------------------------------------------------------------------


async def get_current_user(authorization: str = Header(default="")) -> Optional[dict]:
    """Extract user from the Authorization header. Returns None if no auth."""
    if not authorization or not authorization.startswith("Bearer "):
        return None
    return decode_jwt(authorization[7:])


async def require_user(authorization: str = Header(default="")) -> dict:
    """Reject the request with 401 unless a valid bearer token is present."""
    user = await get_current_user(authorization)
    if user is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return user


# ---------------------------------------------------------------------------
# Request helpers
# ---------------------------------------------------------------------------


def parse_day(value: Optional[str], name: str) -> date:
    """Parse a YYYY-MM-DD query value or raise 400."""
    if not value:
        raise HTTPException(status_code=400, detail=f"Missing required parameter '{name}'")
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid date for '{name}': {value}")


def report_day(today: Optional[str] = None) -> date:
    """Explicit ``today`` override, or the current date on the reporting clock."""
    if today:
        return parse_day(today, "today")
    return reporting_today(settings.report_utc_offset_minutes)
