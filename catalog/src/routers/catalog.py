"""
Catalog home router.

Serves the site root redirect and the catalog home page with record
counts for every collection.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse

from catalog.src.dependencies import (
    get_author_repository,
    get_book_instance_repository,
    get_book_repository,
    get_genre_repository,
)
from catalog.src.repositories import (
    AuthorRepository,
    BookInstanceRepository,
    BookRepository,
    GenreRepository,
)
from catalog.src.services.fanout import fetch_all
from catalog.src.templating import redirect, render

router = APIRouter(tags=["Catalog"])


@router.get("/", include_in_schema=False)
async def root():
    return redirect("/catalog")


@router.get("/catalog", response_class=HTMLResponse, summary="Catalog Home")
async def index(
    request: Request,
    genres: GenreRepository = Depends(get_genre_repository),
    authors: AuthorRepository = Depends(get_author_repository),
    books: BookRepository = Depends(get_book_repository),
    instances: BookInstanceRepository = Depends(get_book_instance_repository),
):
    """Render the home page with counts of books, copies, authors and genres."""
    data = await fetch_all(
        book_count=books.count(),
        book_instance_count=instances.count(),
        book_instance_available_count=instances.count_available(),
        author_count=authors.count(),
        genre_count=genres.count(),
    )
    return render(request, "index.html", {"title": "Local Library Home", "data": data})
