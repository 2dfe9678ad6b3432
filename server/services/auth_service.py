# server/services/auth_service.py
import hmac
from typing import Mapping, Optional

from server.errors import AuthError


def extract_cron_secret(query_args: Mapping[str, str], headers: Mapping[str, str]) -> Optional[str]:
    """
    Read the scheduled-trigger secret.
    - ``?secret=`` query parameter wins.
    - Otherwise an ``Authorization: Bearer <secret>`` header.
    """
    secret = query_args.get("secret")
    if secret:
        return secret
    authorization = headers.get("Authorization") or ""
    if authorization.startswith("Bearer "):
        return authorization[len("Bearer "):].strip() or None
    return None


def verify_cron_secret(provided: Optional[str], expected: Optional[str]) -> None:
    """
    Compare the supplied secret against the configured one in constant time.
    An unconfigured secret rejects every caller.
    """
    if not expected or not provided:
        raise AuthError("Unauthorized")
    if not hmac.compare_digest(provided.encode("utf-8"), expected.encode("utf-8")):
        raise AuthError("Unauthorized")
