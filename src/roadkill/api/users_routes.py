"""
Users Routes

Administrator-only endpoints for looking up, provisioning and soft-deleting
users. Every route requires the Admin policy.
"""

from typing import Annotated, Awaitable, Callable, List

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Response, status

from .models import UserRequest, UserResponse
from .dependencies import get_user_manager
from ..auth.policies import PolicyNames
from ..auth.security import require_policy
from ..auth.user_manager import UserManager
from ..config import settings
from ..core.entities import User
from ..core.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    EMAIL_DOES_NOT_EXIST_MESSAGE,
)

router = APIRouter(
    prefix=f"/v{settings.api_version}/Users",
    tags=["users"],
    dependencies=[Depends(require_policy(PolicyNames.ADMIN))],
)

UserManagerDep = Annotated[UserManager, Depends(get_user_manager)]


@router.get("/FindAll", response_model=List[UserResponse])
async def find_all(users: UserManagerDep) -> List[UserResponse]:
    return [UserResponse.from_user(u) for u in await users.find_all()]


@router.get("/FindUsersWithClaim", response_model=List[UserResponse])
async def find_users_with_claim(
    users: UserManagerDep,
    claim_type: Annotated[str, Query(alias="claimType", min_length=1)],
    claim_value: Annotated[str, Query(alias="claimValue")],
) -> List[UserResponse]:
    found = await users.find_users_with_claim(claim_type, claim_value)
    return [UserResponse.from_user(u) for u in found]


@router.get("/{email}", response_model=UserResponse)
async def get_user(email: str, users: UserManagerDep) -> UserResponse:
    user = await users.get_user(email)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=EMAIL_DOES_NOT_EXIST_MESSAGE)

    return UserResponse.from_user(user)


async def _create(create: Callable[[str, str], Awaitable[User]], req: UserRequest, response: Response) -> str:
    try:
        user = await create(req.email, req.password)
    except (ConflictError, ValidationError) as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))

    response.headers["Location"] = user.email
    return user.email


@router.post("/CreateAdmin", status_code=status.HTTP_201_CREATED, response_model=str)
async def create_admin(req: UserRequest, users: UserManagerDep, response: Response) -> str:
    return await _create(users.create_admin, req, response)


@router.post("/CreateEditor", status_code=status.HTTP_201_CREATED, response_model=str)
async def create_editor(req: UserRequest, users: UserManagerDep, response: Response) -> str:
    return await _create(users.create_editor, req, response)


@router.delete("/Delete", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    email: Annotated[str, Body(min_length=1)],
    users: UserManagerDep,
) -> Response:
    try:
        await users.delete_user(email)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    except ConflictError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))

    return Response(status_code=status.HTTP_204_NO_CONTENT)
