"""
Genre router.

Provides server-rendered views for:
- Genre list and detail (with the books filed under the genre)
- Genre create and update forms
- Genre delete confirmation (refused while books reference the genre)

Genre names are unique. Creating a genre whose name already exists
redirects to the existing genre instead of adding a duplicate.
"""

import structlog
from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse

from catalog.src.dependencies import get_book_repository, get_genre_repository
from catalog.src.errors import DuplicateEntityError, EntityNotFoundError
from catalog.src.models import GenreForm
from catalog.src.repositories import BookRepository, GenreRepository
from catalog.src.services.fanout import fetch_all
from catalog.src.services.validation import FieldError, read_form, validate_form
from catalog.src.templating import redirect, render
from shared.metrics import catalog_metrics

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/catalog", tags=["Genres"])

LIST_URL = "/catalog/genres"


@router.get("/genres", response_class=HTMLResponse, summary="Genre List")
async def genre_list(
    request: Request,
    genres: GenreRepository = Depends(get_genre_repository),
):
    """Render all genres ordered by name."""
    genre_list = await genres.list()
    return render(request, "genre_list.html", {"title": "Genre List", "genre_list": genre_list})


@router.get("/genre/create", response_class=HTMLResponse, summary="Create Genre Form")
async def genre_create_get(request: Request):
    return render(request, "genre_form.html", {"title": "Create Genre"})


@router.post("/genre/create", response_class=HTMLResponse, summary="Create Genre")
async def genre_create_post(
    request: Request,
    genres: GenreRepository = Depends(get_genre_repository),
):
    """
    Create a genre from the submitted form.

    Re-renders the form with violations when validation fails. When a
    genre with the same name exists, redirects to it instead of
    creating a duplicate.
    """
    result = validate_form(GenreForm, await read_form(request, GenreForm))

    if not result.is_valid:
        catalog_metrics.validation_failures.labels(entity="genre").inc()
        return render(request, "genre_form.html", {
            "title": "Create Genre",
            "genre": result.entity,
            "errors": result.errors,
        })

    try:
        genre = await genres.create(result.entity)
    except DuplicateEntityError:
        existing = await genres.get_by_name(result.entity.name)
        if existing is None:
            raise
        logger.info("genre_create_existing", genre_id=existing.id, name=existing.name)
        return redirect(existing.url)

    catalog_metrics.mutations.labels(entity="genre", operation="create").inc()
    return redirect(genre.url)


@router.get("/genre/{id}", response_class=HTMLResponse, summary="Genre Detail")
async def genre_detail(
    request: Request,
    id: str,
    genres: GenreRepository = Depends(get_genre_repository),
    books: BookRepository = Depends(get_book_repository),
):
    """
    Render a genre with the books filed under it.

    Raises:
        EntityNotFoundError: If the genre does not exist
    """
    results = await fetch_all(
        genre=genres.get_by_id(id),
        genre_books=books.list_by_genre(id),
    )
    if results["genre"] is None:
        raise EntityNotFoundError("Genre", id)

    return render(request, "genre_detail.html", {
        "title": "Genre Detail",
        "genre": results["genre"],
        "genre_books": results["genre_books"],
    })


@router.get("/genre/{id}/update", response_class=HTMLResponse, summary="Update Genre Form")
async def genre_update_get(
    request: Request,
    id: str,
    genres: GenreRepository = Depends(get_genre_repository),
):
    genre = await genres.get_by_id(id)
    if genre is None:
        raise EntityNotFoundError("Genre", id)

    return render(request, "genre_form.html", {"title": "Update Genre", "genre": genre})


@router.post("/genre/{id}/update", response_class=HTMLResponse, summary="Update Genre")
async def genre_update_post(
    request: Request,
    id: str,
    genres: GenreRepository = Depends(get_genre_repository),
):
    """
    Overwrite a genre's fields from the submitted form.

    Uses the same rules as create. Renaming onto another genre's name
    is reported on the form rather than written.

    Raises:
        EntityNotFoundError: If the genre does not exist
    """
    result = validate_form(GenreForm, await read_form(request, GenreForm), entity_id=id)

    if result.is_valid:
        try:
            if not await genres.update(id, result.entity):
                raise EntityNotFoundError("Genre", id)
        except DuplicateEntityError:
            result.errors.append(FieldError("name", "Genre with this name already exists."))
        else:
            catalog_metrics.mutations.labels(entity="genre", operation="update").inc()
            return redirect(result.entity.url)

    catalog_metrics.validation_failures.labels(entity="genre").inc()
    return render(request, "genre_form.html", {
        "title": "Update Genre",
        "genre": result.entity,
        "errors": result.errors,
    })


@router.get("/genre/{id}/delete", response_class=HTMLResponse, summary="Delete Genre Form")
async def genre_delete_get(
    request: Request,
    id: str,
    genres: GenreRepository = Depends(get_genre_repository),
    books: BookRepository = Depends(get_book_repository),
):
    """Confirm deletion, listing any books that block it. Unknown ids go back to the list."""
    results = await fetch_all(
        genre=genres.get_by_id(id),
        genre_books=books.list_by_genre(id),
    )
    if results["genre"] is None:
        return redirect(LIST_URL)

    return render(request, "genre_delete.html", {
        "title": "Delete Genre",
        "genre": results["genre"],
        "genre_books": results["genre_books"],
    })


@router.post("/genre/{id}/delete", response_class=HTMLResponse, summary="Delete Genre")
async def genre_delete_post(
    request: Request,
    id: str,
    genres: GenreRepository = Depends(get_genre_repository),
    books: BookRepository = Depends(get_book_repository),
):
    """Delete a genre that no book references; otherwise show what blocks it."""
    results = await fetch_all(
        genre=genres.get_by_id(id),
        genre_books=books.list_by_genre(id),
    )
    if results["genre"] is None:
        return redirect(LIST_URL)

    if results["genre_books"]:
        catalog_metrics.deletes_blocked.labels(entity="genre").inc()
        logger.info("genre_delete_blocked", genre_id=id, books=len(results["genre_books"]))
        return render(request, "genre_delete.html", {
            "title": "Delete Genre",
            "genre": results["genre"],
            "genre_books": results["genre_books"],
        })

    await genres.delete(id)
    catalog_metrics.mutations.labels(entity="genre", operation="delete").inc()
    return redirect(LIST_URL)
