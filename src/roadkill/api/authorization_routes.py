"""
Authorization Routes

Anonymous endpoints that exchange credentials or refresh tokens for a JWT
access token.

Rejected sign-ins answer 403 (not 401) without saying which check failed.
They are returned as plain responses rather than raised, so the request's
unit of work still commits the failed-attempt counter.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from .models import AuthorizationRequest, AuthorizationResponse, RefreshTokenRequest
from .dependencies import get_authentication_service
from ..auth.service import AuthenticationService
from ..core.errors import ForbiddenError, NotFoundError

router = APIRouter(prefix="/Authorization", tags=["authorization"])


def _client_ip(request: Request) -> str:
    return request.client.host if request.client else ""


@router.post(
    "/Authenticate",
    response_model=AuthorizationResponse,
    summary="Exchange email and password for a token pair",
    responses={404: {"description": "Unknown email"}, 403: {"description": "Sign-in rejected"}},
)
async def authenticate(
    req: AuthorizationRequest,
    request: Request,
    auth: Annotated[AuthenticationService, Depends(get_authentication_service)],
):
    try:
        pair = await auth.authenticate(req.email, req.password, _client_ip(request))
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    except ForbiddenError:
        return Response(status_code=status.HTTP_403_FORBIDDEN)

    return AuthorizationResponse(jwt_token=pair.jwt_token, refresh_token=pair.refresh_token)


@router.post(
    "/RefreshToken",
    response_model=AuthorizationResponse,
    summary="Exchange a refresh token for a new token pair",
)
async def refresh_token(
    req: RefreshTokenRequest,
    request: Request,
    auth: Annotated[AuthenticationService, Depends(get_authentication_service)],
):
    try:
        pair = await auth.refresh_token(req.refresh_token, _client_ip(request))
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    except ForbiddenError:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN)

    return AuthorizationResponse(jwt_token=pair.jwt_token, refresh_token=pair.refresh_token)


@router.post(
    "/RevokeRefreshToken",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Revoke a refresh token",
)
async def revoke_refresh_token(
    req: RefreshTokenRequest,
    auth: Annotated[AuthenticationService, Depends(get_authentication_service)],
) -> Response:
    try:
        await auth.revoke_refresh_token(req.refresh_token)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))

    return Response(status_code=status.HTTP_204_NO_CONTENT)
