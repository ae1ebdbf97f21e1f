"""
PageVersions Routes

Read and edit the revision history of pages.

Security Model
--------------
- Reads are anonymous.
- Adding and updating versions requires the Editor policy.
- Deleting a version requires the Admin policy.
"""

from typing import Annotated, List

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from .models import PageVersionRequest, PageVersionResponse
from .dependencies import get_page_version_repository
from ..auth.models import UserContext
from ..auth.policies import PolicyNames
from ..auth.security import require_policy
from ..config import settings
from ..core.entities import PageVersion
from ..core.errors import NotFoundError
from ..db import PageVersionRepository

router = APIRouter(prefix=f"/v{settings.api_version}/PageVersions", tags=["page-versions"])

VersionsDep = Annotated[PageVersionRepository, Depends(get_page_version_repository)]


def _not_found(detail: str = "The page version does not exist.") -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


def _responses(versions: List[PageVersion]) -> List[PageVersionResponse]:
    return [PageVersionResponse.from_version(v) for v in versions]


# ---------------------------------------------------------------------
# Anonymous reads
# ---------------------------------------------------------------------

@router.get("/AllVersions", response_model=List[PageVersionResponse])
async def all_versions(versions: VersionsDep) -> List[PageVersionResponse]:
    return _responses(await versions.all_versions())


@router.get("/FindPageVersionsByPageId", response_model=List[PageVersionResponse])
async def find_page_versions_by_page_id(
    versions: VersionsDep,
    page_id: Annotated[int, Query(alias="pageId")],
) -> List[PageVersionResponse]:
    return _responses(await versions.find_page_versions_by_page_id(page_id))


@router.get("/FindPageVersionsByAuthor", response_model=List[PageVersionResponse])
async def find_page_versions_by_author(
    versions: VersionsDep,
    author: Annotated[str, Query(min_length=1)],
) -> List[PageVersionResponse]:
    return _responses(await versions.find_page_versions_by_author(author))


@router.get("/GetLatestVersion", response_model=PageVersionResponse)
async def get_latest_version(
    versions: VersionsDep,
    page_id: Annotated[int, Query(alias="pageId")],
) -> PageVersionResponse:
    latest = await versions.get_latest_version(page_id)
    if latest is None:
        raise _not_found()

    return PageVersionResponse.from_version(latest)


@router.get("/{version_id}", response_model=PageVersionResponse)
async def get_version(version_id: str, versions: VersionsDep) -> PageVersionResponse:
    version = await versions.get_by_id(version_id)
    if version is None:
        raise _not_found()

    return PageVersionResponse.from_version(version)


# ---------------------------------------------------------------------
# Editor / Admin mutations
# ---------------------------------------------------------------------

@router.post("", status_code=status.HTTP_201_CREATED, response_model=PageVersionResponse)
async def add_version(
    req: PageVersionRequest,
    versions: VersionsDep,
    user: Annotated[UserContext, Depends(require_policy(PolicyNames.EDITOR))],
) -> PageVersionResponse:
    """
    Append a revision. The author defaults to the signed-in user.
    """
    try:
        version = await versions.add_new_version(
            req.page_id,
            req.text,
            req.author or user.email,
            req.date_time,
        )
    except NotFoundError as exc:
        raise _not_found(str(exc))

    return PageVersionResponse.from_version(version)


@router.put("", response_model=PageVersionResponse)
async def update_version(
    req: PageVersionRequest,
    versions: VersionsDep,
    user: Annotated[UserContext, Depends(require_policy(PolicyNames.EDITOR))],
) -> PageVersionResponse:
    if req.id is None:
        raise _not_found()

    existing = await versions.get_by_id(req.id)
    if existing is None:
        raise _not_found()

    try:
        version = await versions.update_existing_version(
            existing.model_copy(update={
                "text": req.text,
                "author": req.author or user.email,
                "date_time": req.date_time or existing.date_time,
            })
        )
    except NotFoundError as exc:
        raise _not_found(str(exc))

    return PageVersionResponse.from_version(version)


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def delete_version(
    versions: VersionsDep,
    user: Annotated[UserContext, Depends(require_policy(PolicyNames.ADMIN))],
    version_id: Annotated[str, Query(alias="id")],
) -> Response:
    try:
        await versions.delete_version(version_id)
    except NotFoundError as exc:
        raise _not_found(str(exc))

    return Response(status_code=status.HTTP_204_NO_CONTENT)
