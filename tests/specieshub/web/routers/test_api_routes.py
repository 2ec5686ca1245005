"""Tests for the JSON API."""

from specieshub.database.core import DatabaseService
from specieshub.species.repository import SpeciesRepository, SpeciesStoreError


class TestHealth:
    """Test the health check endpoint."""

    def test_healthy(self, client):
        """Should report a reachable database."""
        response = client.get("/api/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "ok"
        assert body["version"]

    def test_unhealthy(self, client, mocker):
        """Should answer 503 when the database cannot be reached."""
        mocker.patch.object(DatabaseService, "ping", return_value=False)

        response = client.get("/api/health")

        assert response.status_code == 503
        assert response.json()["status"] == "unhealthy"


class TestAuthStatus:
    """Test the session status endpoint."""

    def test_anonymous(self, client):
        """Should report an anonymous session."""
        assert client.get("/api/auth/status").json() == {
            "authenticated": False,
            "username": None,
        }

    def test_signed_in(self, authenticated_client):
        """Should report the signed-in email."""
        body = authenticated_client.get("/api/auth/status").json()

        assert body == {"authenticated": True, "username": "author@example.com"}


class TestSpeciesApi:
    """Test catalog reads over JSON."""

    def test_requires_sign_in(self, client):
        """Should refuse anonymous reads."""
        assert client.get("/api/species").status_code == 401
        assert client.get("/api/species/1").status_code == 401

    def test_list(self, authenticated_client, app_with_temp_data):
        """Should list every record in id order."""
        response = authenticated_client.get("/api/species")

        assert response.status_code == 200
        body = response.json()
        assert body["count"] == 3
        assert [row["scientific_name"] for row in body["species"]] == [
            "Cavia porcellus",
            "Quercus robur",
            "Amanita muscaria",
        ]
        assert body["species"][0]["author"] == app_with_temp_data.test_data["author_id"]
        assert body["species"][2]["author"] is None

    def test_get_one(self, authenticated_client, app_with_temp_data):
        """Should return a single record."""
        species_id = app_with_temp_data.test_data["foreign_species_id"]

        body = authenticated_client.get(f"/api/species/{species_id}").json()

        assert body["id"] == species_id
        assert body["kingdom"] == "Plantae"
        assert body["common_name"] == "English oak"

    def test_unknown_species(self, authenticated_client):
        """Should answer 404 for an unknown id."""
        assert authenticated_client.get("/api/species/9999").status_code == 404

    def test_store_failure(self, authenticated_client, mocker):
        """Should answer 503 when the store fails."""
        mocker.patch.object(
            SpeciesRepository, "list_species", side_effect=SpeciesStoreError("Could not load species.")
        )

        response = authenticated_client.get("/api/species")

        assert response.status_code == 503
        assert response.json()["detail"] == "Could not load species."
