"""
Pages Routes

Page metadata endpoints. No page text is returned here; use the
PageVersions routes for that.

Security Model
--------------
- Reads are anonymous.
- Adding and updating pages requires the Editor policy.
- Deleting a page requires the Admin policy.
"""

from typing import Annotated, List

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from .models import PageRequest, PageResponse
from .dependencies import get_page_repository, get_page_version_repository
from ..auth.models import UserContext
from ..auth.policies import PolicyNames
from ..auth.security import require_policy
from ..config import settings
from ..core.errors import NotFoundError
from ..db import PageRepository, PageVersionRepository

router = APIRouter(prefix=f"/v{settings.api_version}/Pages", tags=["pages"])

PagesDep = Annotated[PageRepository, Depends(get_page_repository)]

HOMEPAGE_TAG = "homepage"


def _not_found(detail: str = "The page does not exist.") -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


# ---------------------------------------------------------------------
# Anonymous reads
# ---------------------------------------------------------------------

@router.get("/AllPages", response_model=List[PageResponse])
async def all_pages(pages: PagesDep) -> List[PageResponse]:
    return [PageResponse.from_page(p) for p in await pages.all_pages()]


@router.get("/AllPagesCreatedBy", response_model=List[PageResponse])
async def all_pages_created_by(
    pages: PagesDep,
    username: Annotated[str, Query(min_length=1)],
) -> List[PageResponse]:
    return [PageResponse.from_page(p) for p in await pages.find_pages_created_by(username)]


@router.get("/FindHomePage", response_model=PageResponse)
async def find_home_page(pages: PagesDep) -> PageResponse:
    """
    Return the first page tagged "homepage".
    """
    tagged = await pages.find_pages_containing_tag(HOMEPAGE_TAG)
    if not tagged:
        raise _not_found()

    return PageResponse.from_page(tagged[0])


@router.get("/FindByTitle", response_model=PageResponse)
async def find_by_title(
    pages: PagesDep,
    title: Annotated[str, Query(min_length=1)],
) -> PageResponse:
    page = await pages.get_page_by_title(title)
    if page is None:
        raise _not_found()

    return PageResponse.from_page(page)


@router.get("/{page_id}", response_model=PageResponse)
async def get_page(page_id: int, pages: PagesDep) -> PageResponse:
    page = await pages.get_page_by_id(page_id)
    if page is None:
        raise _not_found()

    return PageResponse.from_page(page)


# ---------------------------------------------------------------------
# Editor / Admin mutations
# ---------------------------------------------------------------------

@router.post("", status_code=status.HTTP_201_CREATED, response_model=PageResponse)
async def add_page(
    req: PageRequest,
    pages: PagesDep,
    versions: Annotated[PageVersionRepository, Depends(get_page_version_repository)],
    user: Annotated[UserContext, Depends(require_policy(PolicyNames.EDITOR))],
) -> PageResponse:
    """
    Add a page together with its original version, dated at the page's
    creation time. A missing `text` stores an empty original version.
    """
    page = await pages.add_new_page(req.to_page(user.email).model_copy(update={"id": None}))
    await versions.add_new_version(page.id, req.text or "", page.created_by, page.created_on)

    return PageResponse.from_page(page)


@router.put("", response_model=PageResponse)
async def update_page(
    req: PageRequest,
    pages: PagesDep,
    user: Annotated[UserContext, Depends(require_policy(PolicyNames.EDITOR))],
) -> PageResponse:
    if req.id is None:
        raise _not_found()

    try:
        page = await pages.update_existing(req.to_page(user.email))
    except NotFoundError as exc:
        raise _not_found(str(exc))

    return PageResponse.from_page(page)


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def delete_page(
    pages: PagesDep,
    user: Annotated[UserContext, Depends(require_policy(PolicyNames.ADMIN))],
    page_id: Annotated[int, Query(alias="pageId")],
) -> Response:
    try:
        await pages.delete_page(page_id)
    except NotFoundError as exc:
        raise _not_found(str(exc))

    return Response(status_code=status.HTTP_204_NO_CONTENT)
