from fastapi import HTTPException, Request

from lumber_sales.services.errors import NotFoundError


def get_client_ip(request: Request) -> str | None:
    forwarded_for = request.headers.get('x-forwarded-for')
    if forwarded_for:
        return forwarded_for.split(',')[0].strip()
    if request.client:
        return request.client.host
    return None


def http_error(exc: ValueError) -> HTTPException:
    status_code = 404 if isinstance(exc, NotFoundError) else 400
    return HTTPException(status_code=status_code, detail=str(exc))
