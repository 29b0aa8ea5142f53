"""Network context of a request: client IP and user agent.

Used to identify guest voters and for the vote audit trail.
"""

from collections.abc import Mapping
from dataclasses import dataclass

from starlette.requests import Request

UNKNOWN = "unknown"


@dataclass(frozen=True)
class NetworkContext:
    ip_address: str
    user_agent: str


def client_ip(headers: Mapping[str, str]) -> str:
    """First X-Forwarded-For hop, else X-Real-IP, else "unknown".

    Starlette headers are case-insensitive; plain dicts must use lowercase keys.
    """
    forwarded_for = headers.get("x-forwarded-for")
    if forwarded_for:
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first
    real_ip = headers.get("x-real-ip")
    if real_ip and real_ip.strip():
        return real_ip.strip()
    return UNKNOWN


def extract_network_context(request: Request) -> NetworkContext:
    return NetworkContext(
        ip_address=client_ip(request.headers),
        user_agent=request.headers.get("user-agent") or UNKNOWN,
    )
