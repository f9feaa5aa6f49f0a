"""Identifying the client behind a request."""

from starlette.requests import Request

from b2bvendas.domain.auditoria.service import UNKNOWN, ClientInfo


def client_ip(request: Request, *, trust_proxy_headers: bool = False) -> str:
    """Client address; proxy headers count only when ``trust_proxy_headers``."""
    if trust_proxy_headers:
        if forwarded_for := request.headers.get("x-forwarded-for"):
            return forwarded_for.split(",")[0].strip()
        if real_ip := request.headers.get("x-real-ip"):
            return real_ip.strip()

    if request.client:
        return request.client.host
    return UNKNOWN


def client_info(request: Request, *, trust_proxy_headers: bool = False) -> ClientInfo:
    return ClientInfo(
        ip=client_ip(request, trust_proxy_headers=trust_proxy_headers),
        user_agent=request.headers.get("user-agent") or UNKNOWN,
    )
