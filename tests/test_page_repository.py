from datetime import datetime

import pytest

from roadkill.core.entities import Page
from roadkill.core.errors import NotFoundError
from roadkill.db import PageRepository


CREATED_ON = datetime(2024, 3, 1, 9, 30)


def _page(title: str, created_by: str = "editor", tags=None) -> Page:
    return Page(title=title, tags=tags or [], created_by=created_by, created_on=CREATED_ON)


@pytest.mark.asyncio
async def test_add_new_page_assigns_id(session):
    pages = PageRepository(session)

    first = await pages.add_new_page(_page("First"))
    second = await pages.add_new_page(_page("Second"))

    assert first.id is not None
    assert second.id != first.id
    assert first.created_on == CREATED_ON
    assert await pages.get_page_by_id(first.id) == first


@pytest.mark.asyncio
async def test_add_new_page_defaults_created_on(session):
    page = await PageRepository(session).add_new_page(Page(title="Undated", created_by="editor"))

    assert page.created_on is not None


@pytest.mark.asyncio
async def test_tags_are_deduplicated(session):
    page = await PageRepository(session).add_new_page(_page("Tagged", tags=["a", "b", "a", " "]))

    assert page.tags == ["a", "b"]


@pytest.mark.asyncio
async def test_get_page_by_title_ignores_case(session):
    pages = PageRepository(session)
    page = await pages.add_new_page(_page("My Page"))

    assert await pages.get_page_by_title("my page") == page
    assert await pages.get_page_by_title("other") is None


@pytest.mark.asyncio
async def test_get_missing_page_is_none(session):
    assert await PageRepository(session).get_page_by_id(42) is None


@pytest.mark.asyncio
async def test_all_pages_and_created_by(session):
    pages = PageRepository(session)
    await pages.add_new_page(_page("One", created_by="alice"))
    await pages.add_new_page(_page("Two", created_by="bob"))
    await pages.add_new_page(_page("Three", created_by="Alice"))

    assert [p.title for p in await pages.all_pages()] == ["One", "Two", "Three"]
    assert [p.title for p in await pages.find_pages_created_by("alice")] == ["One", "Three"]


@pytest.mark.asyncio
async def test_find_pages_containing_tag(session):
    pages = PageRepository(session)
    await pages.add_new_page(_page("Home", tags=["HomePage", "main"]))
    await pages.add_new_page(_page("Other", tags=["misc"]))

    found = await pages.find_pages_containing_tag("homepage")

    assert [p.title for p in found] == ["Home"]


@pytest.mark.asyncio
async def test_update_existing(session):
    pages = PageRepository(session)
    page = await pages.add_new_page(_page("Before"))

    updated = await pages.update_existing(
        page.model_copy(update={"title": "After", "tags": ["new"], "last_modified_by": "bob"})
    )

    assert updated.id == page.id
    assert updated.title == "After"
    assert updated.tags == ["new"]
    assert updated.last_modified_by == "bob"
    assert updated.last_modified_on is not None
    assert updated.created_by == page.created_by


@pytest.mark.asyncio
async def test_update_missing_page_raises(session):
    with pytest.raises(NotFoundError):
        await PageRepository(session).update_existing(_page("Ghost").model_copy(update={"id": 77}))


@pytest.mark.asyncio
async def test_delete_page(session):
    pages = PageRepository(session)
    keep = await pages.add_new_page(_page("Keep"))
    drop = await pages.add_new_page(_page("Drop"))

    await pages.delete_page(drop.id)

    assert await pages.get_page_by_id(drop.id) is None
    assert await pages.all_pages() == [keep]

    with pytest.raises(NotFoundError):
        await pages.delete_page(drop.id)
