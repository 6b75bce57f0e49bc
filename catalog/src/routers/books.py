"""
Book router.

Provides server-rendered views for:
- Book list (with authors) and detail (with author, genres and copies)
- Book create and update forms, offering every author and genre
- Book delete confirmation (refused while copies of the book exist)
"""

import structlog
from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from markupsafe import Markup

from catalog.src.dependencies import get_book_instance_repository, get_book_repository
from catalog.src.errors import EntityNotFoundError
from catalog.src.models import BookForm
from catalog.src.repositories import BookInstanceRepository, BookRepository
from catalog.src.services.fanout import fetch_all
from catalog.src.services.validation import read_form, validate_form
from catalog.src.templating import redirect, render
from shared.metrics import catalog_metrics

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/catalog", tags=["Books"])

LIST_URL = "/catalog/books"


async def _form_options(books: BookRepository) -> dict:
    """All authors and genres, for the author select and genre checkboxes."""
    return await fetch_all(authors=books.authors.list(), genres=books.genres.list())


@router.get("/books", response_class=HTMLResponse, summary="Book List")
async def book_list(
    request: Request,
    books: BookRepository = Depends(get_book_repository),
):
    """Render all books ordered by title, each with its author."""
    book_list = await books.list_populated()
    return render(request, "book_list.html", {"title": "Book List", "book_list": book_list})


@router.get("/book/create", response_class=HTMLResponse, summary="Create Book Form")
async def book_create_get(
    request: Request,
    books: BookRepository = Depends(get_book_repository),
):
    options = await _form_options(books)
    return render(request, "book_form.html", {"title": "Create Book", **options})


@router.post("/book/create", response_class=HTMLResponse, summary="Create Book")
async def book_create_post(
    request: Request,
    books: BookRepository = Depends(get_book_repository),
):
    """
    Create a book from the submitted form.

    On validation failure the form is re-rendered with the submitted
    values, the violations and fresh author/genre option lists.
    """
    result = validate_form(BookForm, await read_form(request, BookForm))

    if not result.is_valid:
        catalog_metrics.validation_failures.labels(entity="book").inc()
        options = await _form_options(books)
        return render(request, "book_form.html", {
            "title": "Create Book",
            "book": result.entity,
            "errors": result.errors,
            **options,
        })

    book = await books.create(result.entity)
    catalog_metrics.mutations.labels(entity="book", operation="create").inc()
    return redirect(book.url)


@router.get("/book/{id}", response_class=HTMLResponse, summary="Book Detail")
async def book_detail(
    request: Request,
    id: str,
    books: BookRepository = Depends(get_book_repository),
    instances: BookInstanceRepository = Depends(get_book_instance_repository),
):
    """
    Render a book with its author, genres and copies.

    Raises:
        EntityNotFoundError: If the book does not exist
    """
    results = await fetch_all(
        book=books.get_populated(id),
        book_instances=instances.list_by_book(id),
    )
    book = results["book"]
    if book is None:
        raise EntityNotFoundError("Book", id)

    return render(request, "book_detail.html", {
        "title": Markup(book.title),
        "book": book,
        "book_instances": results["book_instances"],
    })


@router.get("/book/{id}/update", response_class=HTMLResponse, summary="Update Book Form")
async def book_update_get(
    request: Request,
    id: str,
    books: BookRepository = Depends(get_book_repository),
):
    results = await fetch_all(
        book=books.get_by_id(id),
        authors=books.authors.list(),
        genres=books.genres.list(),
    )
    if results["book"] is None:
        raise EntityNotFoundError("Book", id)

    return render(request, "book_form.html", {"title": "Update Book", **results})


@router.post("/book/{id}/update", response_class=HTMLResponse, summary="Update Book")
async def book_update_post(
    request: Request,
    id: str,
    books: BookRepository = Depends(get_book_repository),
):
    """
    Overwrite a book's fields from the submitted form.

    Raises:
        EntityNotFoundError: If the book does not exist
    """
    result = validate_form(BookForm, await read_form(request, BookForm), entity_id=id)

    if not result.is_valid:
        catalog_metrics.validation_failures.labels(entity="book").inc()
        options = await _form_options(books)
        return render(request, "book_form.html", {
            "title": "Update Book",
            "book": result.entity,
            "errors": result.errors,
            **options,
        })

    if not await books.update(id, result.entity):
        raise EntityNotFoundError("Book", id)

    catalog_metrics.mutations.labels(entity="book", operation="update").inc()
    return redirect(result.entity.url)


@router.get("/book/{id}/delete", response_class=HTMLResponse, summary="Delete Book Form")
async def book_delete_get(
    request: Request,
    id: str,
    books: BookRepository = Depends(get_book_repository),
    instances: BookInstanceRepository = Depends(get_book_instance_repository),
):
    results = await fetch_all(
        book=books.get_populated(id),
        book_instances=instances.list_by_book(id),
    )
    if results["book"] is None:
        return redirect(LIST_URL)

    return render(request, "book_delete.html", {"title": "Delete Book", **results})


@router.post("/book/{id}/delete", response_class=HTMLResponse, summary="Delete Book")
async def book_delete_post(
    request: Request,
    id: str,
    books: BookRepository = Depends(get_book_repository),
    instances: BookInstanceRepository = Depends(get_book_instance_repository),
):
    """Delete a book with no copies; otherwise list the copies that block it."""
    results = await fetch_all(
        book=books.get_populated(id),
        book_instances=instances.list_by_book(id),
    )
    if results["book"] is None:
        return redirect(LIST_URL)

    if results["book_instances"]:
        catalog_metrics.deletes_blocked.labels(entity="book").inc()
        logger.info("book_delete_blocked", book_id=id, copies=len(results["book_instances"]))
        return render(request, "book_delete.html", {"title": "Delete Book", **results})

    await books.delete(id)
    catalog_metrics.mutations.labels(entity="book", operation="delete").inc()
    return redirect(LIST_URL)
