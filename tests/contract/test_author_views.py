"""
Contract tests for the author views.

Tests verify the HTTP contract of /catalog/author*:
- Derived fields in rendered pages
- Date handling on create and update
- Blocked and permitted deletes
"""

from datetime import datetime

from bson import ObjectId


class TestAuthorList:
    """Test GET /catalog/authors."""

    def test_lists_authors_with_lifespan(self, client, database, library):
        database.seed(
            "authors",
            first_name="Isaac",
            family_name="Asimov",
            date_of_birth=datetime(1920, 1, 2),
            date_of_death=datetime(1992, 4, 6),
        )

        response = client.get("/catalog/authors")

        assert response.status_code == 200
        assert "Asimov, Isaac" in response.text
        assert "January 2, 1920 - April 6, 1992" in response.text
        assert "June 6, 1973 - Present" in response.text
        assert response.text.index("Asimov") < response.text.index("Rothfuss")


class TestAuthorDetail:
    """Test GET /catalog/author/{id}."""

    def test_shows_author_and_books(self, client, library):
        response = client.get(f"/catalog/author/{library.author_id}")

        assert response.status_code == 200
        assert "Author: Rothfuss, Patrick" in response.text
        assert "The Name of the Wind" in response.text

    def test_unknown_id_is_404(self, client):
        response = client.get(f"/catalog/author/{ObjectId()}")
        assert response.status_code == 404
        assert "Author not found" in response.text


class TestAuthorCreate:
    """Test GET/POST /catalog/author/create."""

    def test_empty_form(self, client):
        response = client.get("/catalog/author/create")
        assert response.status_code == 200
        assert 'name="family_name"' in response.text

    def test_create_redirects_to_author(self, client, database):
        response = client.post("/catalog/author/create", data={
            "first_name": "Ursula",
            "family_name": " Le Guin ",
            "date_of_birth": "1929-10-21",
            "date_of_death": "2018-01-22",
        })

        assert response.status_code == 303
        [stored] = database.stored("authors")
        assert stored["family_name"] == "Le Guin"
        assert stored["date_of_birth"] == datetime(1929, 10, 21)
        assert response.headers["location"] == f"/catalog/author/{stored['_id']}"

        detail = client.get(response.headers["location"])
        assert "October 21, 1929 - January 22, 2018" in detail.text

    def test_violations_rerender_form(self, client, database):
        response = client.post("/catalog/author/create", data={
            "first_name": "",
            "family_name": "Doe",
            "date_of_birth": "not a date",
        })

        assert response.status_code == 200
        assert "First name must be specified." in response.text
        assert "Invalid date of birth" in response.text
        assert 'value="not a date"' in response.text
        assert 'value="Doe"' in response.text
        assert database.stored("authors") == []

    def test_rejected_date_is_echoed_escaped(self, client, database):
        response = client.post("/catalog/author/create", data={
            "first_name": "Jane",
            "family_name": "Doe",
            "date_of_death": "\"><script>",
        })

        assert "Invalid date of death" in response.text
        assert "<script>" not in response.text
        assert 'value="&#34;&gt;&lt;script&gt;"' in response.text
        assert database.stored("authors") == []

    def test_death_before_birth(self, client, database):
        response = client.post("/catalog/author/create", data={
            "first_name": "Jane",
            "family_name": "Doe",
            "date_of_birth": "2000-01-01",
            "date_of_death": "1990-01-01",
        })

        assert "Date of death cannot be earlier than date of birth." in response.text
        assert database.stored("authors") == []


class TestAuthorUpdate:
    """Test GET/POST /catalog/author/{id}/update."""

    def test_prefilled_form(self, client, library):
        response = client.get(f"/catalog/author/{library.author_id}/update")
        assert response.status_code == 200
        assert 'value="Rothfuss"' in response.text
        assert 'value="1973-06-06"' in response.text

    def test_update_round_trip(self, client, database, library):
        response = client.post(f"/catalog/author/{library.author_id}/update", data={
            "first_name": "Pat",
            "family_name": "Rothfuss",
            "date_of_birth": "1973-06-06",
            "date_of_death": "",
        })

        assert response.status_code == 303
        assert response.headers["location"] == f"/catalog/author/{library.author_id}"
        detail = client.get(response.headers["location"])
        assert "Author: Rothfuss, Pat" in detail.text
        assert len(database.stored("authors")) == 1

    def test_update_unknown_id_is_404(self, client):
        response = client.post(f"/catalog/author/{ObjectId()}/update", data={
            "first_name": "A",
            "family_name": "B",
        })
        assert response.status_code == 404


class TestAuthorDelete:
    """Test GET/POST /catalog/author/{id}/delete."""

    def test_unknown_id_redirects_to_list(self, client):
        response = client.get(f"/catalog/author/{ObjectId()}/delete")
        assert response.status_code == 303
        assert response.headers["location"] == "/catalog/authors"

    def test_delete_blocked_by_books(self, client, database, library):
        response = client.post(f"/catalog/author/{library.author_id}/delete")

        assert response.status_code == 200
        assert "Delete the following books before attempting to delete this author." in response.text
        assert len(database.stored("authors")) == 1

    def test_delete_author_without_books(self, client, database, library):
        author_id = database.seed("authors", first_name="Nobody", family_name="Wrote")

        confirm = client.get(f"/catalog/author/{author_id}/delete")
        assert "Do you really want to delete this Author?" in confirm.text

        response = client.post(f"/catalog/author/{author_id}/delete")

        assert response.status_code == 303
        assert response.headers["location"] == "/catalog/authors"
        assert [doc["family_name"] for doc in database.stored("authors")] == ["Rothfuss"]
