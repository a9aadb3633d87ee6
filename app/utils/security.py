"""
Security utilities: authentication, rate limiting and PII masking
"""

import secrets
import time
from collections import deque
from typing import Deque, Dict, Optional

from fastapi import HTTPException, Depends, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from app.core.config import settings

WINDOW_SECONDS = 60


class SlidingWindowLimiter:
    """In-memory per-client request log over a sliding window.

    Clients whose window has emptied are dropped, so the map only holds
    clients seen within the last ``window`` seconds.
    """

    def __init__(self, window: float = WINDOW_SECONDS):
        self.window = window
        self.hits: Dict[str, Deque[float]] = {}

    def allow(self, client: str, limit: int, now: Optional[float] = None) -> bool:
        if now is None:
            now = time.time()
        self._evict(now - self.window)

        hits = self.hits.setdefault(client, deque())
        if len(hits) >= limit:
            return False
        hits.append(now)
        return True

    def _evict(self, cutoff: float) -> None:
        for client in list(self.hits):
            hits = self.hits[client]
            while hits and hits[0] <= cutoff:
                hits.popleft()
            if not hits:
                del self.hits[client]

    def clear(self) -> None:
        self.hits.clear()

    def __contains__(self, client: str) -> bool:
        return client in self.hits


rate_limiter = SlidingWindowLimiter()

security = HTTPBearer()

def verify_admin_token(credentials: HTTPAuthorizationCredentials = Depends(security)):
    """Check the bearer token against the configured admin token"""
    if not secrets.compare_digest(credentials.credentials, settings.ADMIN_TOKEN):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid admin token"
        )
    return credentials.credentials

def rate_limit_check(client_ip: str, limit: Optional[int] = None, now: Optional[float] = None) -> bool:
    """True when the client is still under its per-minute request limit"""
    if limit is None:
        limit = settings.RATE_LIMIT_PER_MINUTE
    return rate_limiter.allow(client_ip, limit, now)

def get_client_ip(request) -> str:
    """Client address, preferring proxy headers"""
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    return request.headers.get("X-Real-IP") or request.client.host

def mask_email(email: Optional[str]) -> Optional[str]:
    """Mask the local part of an email, keeping at most two leading characters"""
    if not email or "@" not in email:
        return email

    local_part, domain = email.split("@", 1)
    if len(local_part) <= 2:
        return f"{local_part[:1]}*@{domain}"

    visible = min(2, len(local_part) - 1)
    masked = local_part[:visible] + "*" * max(1, len(local_part) - visible)
    return f"{masked}@{domain}"

def mask_phone(phone: Optional[str]) -> Optional[str]:
    """Mask the middle digits of a phone number"""
    if not phone or len(phone) < 4:
        return phone

    if len(phone) <= 6:
        return phone[:2] + "*" * (len(phone) - 4) + phone[-2:]

    return phone[:3] + "*" * (len(phone) - 6) + phone[-3:]

def mask_guest(guest: dict) -> dict:
    """Return a copy of a guest payload with email and phone masked"""
    masked = dict(guest)
    masked["email"] = mask_email(guest.get("email"))
    masked["phone"] = mask_phone(guest.get("phone"))
    return masked
