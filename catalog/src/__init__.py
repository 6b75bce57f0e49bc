"""FastAPI service for the local library catalog.

This package serves server-rendered list, detail, create, update and
delete views for genres, authors, books and book instances stored in
MongoDB.
"""

__version__ = "0.1.0"
