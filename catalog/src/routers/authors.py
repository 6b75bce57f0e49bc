"""
Author router.

Provides server-rendered views for:
- Author list and detail (with the author's books)
- Author create and update forms
- Author delete confirmation (refused while the author has books)
"""

import structlog
from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse

from catalog.src.dependencies import get_author_repository, get_book_repository
from catalog.src.errors import EntityNotFoundError
from catalog.src.models import AuthorForm
from catalog.src.repositories import AuthorRepository, BookRepository
from catalog.src.services.fanout import fetch_all
from catalog.src.services.validation import read_form, validate_form
from catalog.src.templating import redirect, render
from shared.metrics import catalog_metrics

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/catalog", tags=["Authors"])

LIST_URL = "/catalog/authors"


@router.get("/authors", response_class=HTMLResponse, summary="Author List")
async def author_list(
    request: Request,
    authors: AuthorRepository = Depends(get_author_repository),
):
    """Render all authors ordered by family name, then first name."""
    author_list = await authors.list()
    return render(request, "author_list.html", {"title": "Author List", "author_list": author_list})


@router.get("/author/create", response_class=HTMLResponse, summary="Create Author Form")
async def author_create_get(request: Request):
    return render(request, "author_form.html", {"title": "Create Author"})


@router.post("/author/create", response_class=HTMLResponse, summary="Create Author")
async def author_create_post(
    request: Request,
    authors: AuthorRepository = Depends(get_author_repository),
):
    result = validate_form(AuthorForm, await read_form(request, AuthorForm))

    if not result.is_valid:
        catalog_metrics.validation_failures.labels(entity="author").inc()
        return render(request, "author_form.html", {
            "title": "Create Author",
            "author": result.entity,
            "errors": result.errors,
            "submitted": result.submitted,
        })

    author = await authors.create(result.entity)
    catalog_metrics.mutations.labels(entity="author", operation="create").inc()
    return redirect(author.url)


@router.get("/author/{id}", response_class=HTMLResponse, summary="Author Detail")
async def author_detail(
    request: Request,
    id: str,
    authors: AuthorRepository = Depends(get_author_repository),
    books: BookRepository = Depends(get_book_repository),
):
    """
    Render an author with the books they wrote.

    Raises:
        EntityNotFoundError: If the author does not exist
    """
    results = await fetch_all(
        author=authors.get_by_id(id),
        author_books=books.list_by_author(id),
    )
    if results["author"] is None:
        raise EntityNotFoundError("Author", id)

    return render(request, "author_detail.html", {
        "title": "Author Detail",
        "author": results["author"],
        "author_books": results["author_books"],
    })


@router.get("/author/{id}/update", response_class=HTMLResponse, summary="Update Author Form")
async def author_update_get(
    request: Request,
    id: str,
    authors: AuthorRepository = Depends(get_author_repository),
):
    author = await authors.get_by_id(id)
    if author is None:
        raise EntityNotFoundError("Author", id)

    return render(request, "author_form.html", {"title": "Update Author", "author": author})


@router.post("/author/{id}/update", response_class=HTMLResponse, summary="Update Author")
async def author_update_post(
    request: Request,
    id: str,
    authors: AuthorRepository = Depends(get_author_repository),
):
    """
    Overwrite an author's fields from the submitted form.

    Raises:
        EntityNotFoundError: If the author does not exist
    """
    result = validate_form(AuthorForm, await read_form(request, AuthorForm), entity_id=id)

    if not result.is_valid:
        catalog_metrics.validation_failures.labels(entity="author").inc()
        return render(request, "author_form.html", {
            "title": "Update Author",
            "author": result.entity,
            "errors": result.errors,
            "submitted": result.submitted,
        })

    if not await authors.update(id, result.entity):
        raise EntityNotFoundError("Author", id)

    catalog_metrics.mutations.labels(entity="author", operation="update").inc()
    return redirect(result.entity.url)


@router.get("/author/{id}/delete", response_class=HTMLResponse, summary="Delete Author Form")
async def author_delete_get(
    request: Request,
    id: str,
    authors: AuthorRepository = Depends(get_author_repository),
    books: BookRepository = Depends(get_book_repository),
):
    results = await fetch_all(
        author=authors.get_by_id(id),
        author_books=books.list_by_author(id),
    )
    if results["author"] is None:
        return redirect(LIST_URL)

    return render(request, "author_delete.html", {
        "title": "Delete Author",
        "author": results["author"],
        "author_books": results["author_books"],
    })


@router.post("/author/{id}/delete", response_class=HTMLResponse, summary="Delete Author")
async def author_delete_post(
    request: Request,
    id: str,
    authors: AuthorRepository = Depends(get_author_repository),
    books: BookRepository = Depends(get_book_repository),
):
    """Delete an author with no books; otherwise list the books that block it."""
    results = await fetch_all(
        author=authors.get_by_id(id),
        author_books=books.list_by_author(id),
    )
    if results["author"] is None:
        return redirect(LIST_URL)

    if results["author_books"]:
        catalog_metrics.deletes_blocked.labels(entity="author").inc()
        logger.info("author_delete_blocked", author_id=id, books=len(results["author_books"]))
        return render(request, "author_delete.html", {
            "title": "Delete Author",
            "author": results["author"],
            "author_books": results["author_books"],
        })

    await authors.delete(id)
    catalog_metrics.mutations.labels(entity="author", operation="delete").inc()
    return redirect(LIST_URL)
