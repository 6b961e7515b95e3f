"""Client identity resolution for rate limiting.

Order of preference:
    1. explicit user id            -> "user:{id}"
    2. first X-Forwarded-For entry -> "ip:{addr}"
    3. X-Real-IP                   -> "ip:{addr}"
    4. socket peer address         -> "ip:{addr}"
    5. "anonymous"

Unidentifiable clients share the "anonymous" counter. That is accepted:
they are throttled together rather than not at all.
"""

from starlette.requests import Request

ANONYMOUS_IDENTITY = "anonymous"


def get_client_ip(request: Request) -> str | None:
    """Extract the client IP, honoring reverse proxy headers.

    Args:
        request: Incoming request.

    Returns:
        str | None: Client address, None if nothing usable is present.
    """
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first

    real_ip = request.headers.get("x-real-ip")
    if real_ip and real_ip.strip():
        return real_ip.strip()

    if request.client and request.client.host:
        return request.client.host

    return None


def resolve_identity(request: Request, user_id: str | None = None) -> str:
    """Rate limit identity for a request.

    Args:
        request: Incoming request.
        user_id: Authenticated user id, when the caller knows it.

    Returns:
        str: "user:{id}", "ip:{addr}" or "anonymous".
    """
    if user_id:
        return f"user:{user_id}"

    client_ip = get_client_ip(request)
    if client_ip:
        return f"ip:{client_ip}"

    return ANONYMOUS_IDENTITY
