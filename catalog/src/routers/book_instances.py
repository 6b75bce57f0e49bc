"""
BookInstance router.

Provides server-rendered views for the physical copies of books. Copies
have no dependents, so deleting one is never refused.
"""

import structlog
from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from markupsafe import Markup

from catalog.src.dependencies import get_book_instance_repository
from catalog.src.errors import EntityNotFoundError
from catalog.src.models import BookInstanceForm, BookInstanceStatus
from catalog.src.repositories import BookInstanceRepository
from catalog.src.services.fanout import fetch_all
from catalog.src.services.validation import read_form, validate_form
from catalog.src.templating import redirect, render
from shared.metrics import catalog_metrics

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/catalog", tags=["Book Instances"])

LIST_URL = "/catalog/bookinstances"

STATUSES = [status.value for status in BookInstanceStatus]


async def _form_context(instances: BookInstanceRepository, title: str, **context) -> dict:
    book_list = await instances.books.list()
    return {"title": title, "book_list": book_list, "statuses": STATUSES, **context}


@router.get("/bookinstances", response_class=HTMLResponse, summary="Book Instance List")
async def bookinstance_list(
    request: Request,
    instances: BookInstanceRepository = Depends(get_book_instance_repository),
):
    bookinstance_list = await instances.list_populated()
    return render(request, "bookinstance_list.html", {
        "title": "Book Instance List",
        "bookinstance_list": bookinstance_list,
    })


@router.get("/bookinstance/create", response_class=HTMLResponse, summary="Create Book Instance Form")
async def bookinstance_create_get(
    request: Request,
    instances: BookInstanceRepository = Depends(get_book_instance_repository),
):
    context = await _form_context(instances, "Create BookInstance")
    return render(request, "bookinstance_form.html", context)


@router.post("/bookinstance/create", response_class=HTMLResponse, summary="Create Book Instance")
async def bookinstance_create_post(
    request: Request,
    instances: BookInstanceRepository = Depends(get_book_instance_repository),
):
    """
    Create a copy from the submitted form.

    A missing status means Maintenance and a missing due date means now.
    """
    result = validate_form(BookInstanceForm, await read_form(request, BookInstanceForm))

    if not result.is_valid:
        catalog_metrics.validation_failures.labels(entity="bookinstance").inc()
        context = await _form_context(
            instances, "Create BookInstance",
            bookinstance=result.entity,
            errors=result.errors,
            submitted=result.submitted,
        )
        return render(request, "bookinstance_form.html", context)

    instance = await instances.create(result.entity)
    catalog_metrics.mutations.labels(entity="bookinstance", operation="create").inc()
    return redirect(instance.url)


@router.get("/bookinstance/{id}", response_class=HTMLResponse, summary="Book Instance Detail")
async def bookinstance_detail(
    request: Request,
    id: str,
    instances: BookInstanceRepository = Depends(get_book_instance_repository),
):
    """
    Render a copy with its book.

    Raises:
        EntityNotFoundError: If the copy does not exist
    """
    instance = await instances.get_populated(id)
    if instance is None:
        raise EntityNotFoundError("Book copy", id)

    title = Markup(f"Copy: {instance.book.title}") if instance.book else "Book Instance Detail"
    return render(request, "bookinstance_detail.html", {"title": title, "bookinstance": instance})


@router.get("/bookinstance/{id}/update", response_class=HTMLResponse, summary="Update Book Instance Form")
async def bookinstance_update_get(
    request: Request,
    id: str,
    instances: BookInstanceRepository = Depends(get_book_instance_repository),
):
    results = await fetch_all(
        bookinstance=instances.get_by_id(id),
        book_list=instances.books.list(),
    )
    if results["bookinstance"] is None:
        raise EntityNotFoundError("Book copy", id)

    return render(request, "bookinstance_form.html", {
        "title": "Update BookInstance",
        "statuses": STATUSES,
        **results,
    })


@router.post("/bookinstance/{id}/update", response_class=HTMLResponse, summary="Update Book Instance")
async def bookinstance_update_post(
    request: Request,
    id: str,
    instances: BookInstanceRepository = Depends(get_book_instance_repository),
):
    """
    Overwrite a copy's fields from the submitted form.

    Raises:
        EntityNotFoundError: If the copy does not exist
    """
    result = validate_form(
        BookInstanceForm, await read_form(request, BookInstanceForm), entity_id=id
    )

    if not result.is_valid:
        catalog_metrics.validation_failures.labels(entity="bookinstance").inc()
        context = await _form_context(
            instances, "Update BookInstance",
            bookinstance=result.entity,
            errors=result.errors,
            submitted=result.submitted,
        )
        return render(request, "bookinstance_form.html", context)

    if not await instances.update(id, result.entity):
        raise EntityNotFoundError("Book copy", id)

    catalog_metrics.mutations.labels(entity="bookinstance", operation="update").inc()
    return redirect(result.entity.url)


@router.get("/bookinstance/{id}/delete", response_class=HTMLResponse, summary="Delete Book Instance Form")
async def bookinstance_delete_get(
    request: Request,
    id: str,
    instances: BookInstanceRepository = Depends(get_book_instance_repository),
):
    instance = await instances.get_populated(id)
    if instance is None:
        return redirect(LIST_URL)

    return render(request, "bookinstance_delete.html", {
        "title": "Delete BookInstance",
        "bookinstance": instance,
    })


@router.post("/bookinstance/{id}/delete", response_class=HTMLResponse, summary="Delete Book Instance")
async def bookinstance_delete_post(
    request: Request,
    id: str,
    instances: BookInstanceRepository = Depends(get_book_instance_repository),
):
    if await instances.delete(id):
        catalog_metrics.mutations.labels(entity="bookinstance", operation="delete").inc()
    else:
        logger.info("bookinstance_delete_missing", bookinstance_id=id)
    return redirect(LIST_URL)
