from pathlib import Path
from unittest.mock import AsyncMock

import pytest
import redis.asyncio
from dependency_injector import providers
from starlette.testclient import TestClient

from specieshub.config import ConfigManager
from specieshub.config.models import SpeciesHubConfig
from specieshub.database.core import DatabaseService
from specieshub.species.models import Kingdom, Species, SpeciesValues
from specieshub.species.repository import SpeciesRepository
from specieshub.system.path_resolver import PathResolver
from specieshub.utils.auth import AccountService
from specieshub.web.core.container import Container
from specieshub.web.core.factory import create_app

TEST_PASSWORD = "testpassword"
AUTHOR_EMAIL = "author@example.com"
OTHER_EMAIL = "other@example.com"


@pytest.fixture(scope="session")
def repo_root() -> Path:
    """Get the absolute path to the repository root.

    This fixture provides a consistent way to access the repository root
    regardless of where tests are located or how they're organized.
    """
    return Path(__file__).parent.parent.resolve()


@pytest.fixture
def path_resolver(tmp_path: Path, repo_root: Path) -> PathResolver:
    """Provide a PathResolver with read-only assets from the repo and writable data in tmp.

    Templates and static files (including the bundled speed CSV) come from the
    source tree; the database and config file live under ``tmp_path`` so tests
    never write to the real data directory.
    """
    real_web_dir = repo_root / "src" / "specieshub" / "web"

    resolver = PathResolver()

    temp_database_dir = tmp_path / "database"
    temp_database_dir.mkdir(parents=True)
    temp_config_dir = tmp_path / "config"
    temp_config_dir.mkdir(parents=True)
    temp_data_dir = tmp_path / "data"
    temp_data_dir.mkdir(parents=True)

    # Override WRITABLE paths to use temp directory
    resolver.data_dir = temp_data_dir
    resolver.get_data_dir = lambda: temp_data_dir
    resolver.get_database_dir = lambda: temp_database_dir
    resolver.get_database_path = lambda: temp_database_dir / "specieshub.db"
    resolver.get_specieshub_config_path = lambda: temp_config_dir / "specieshub.yaml"

    # Keep READ-ONLY paths pointing to real repo locations
    resolver.get_static_dir = lambda: real_web_dir / "static"
    resolver.get_templates_dir = lambda: real_web_dir / "templates"

    return resolver


@pytest.fixture
def test_config(path_resolver: PathResolver) -> SpeciesHubConfig:
    """Should load test configuration from the temp config file."""
    return ConfigManager(path_resolver).load()


@pytest.fixture
async def database_service(path_resolver: PathResolver):
    """Provide an initialized DatabaseService on a temp SQLite file."""
    service = DatabaseService(path_resolver.get_database_path())
    await service.initialize()
    yield service
    await service.dispose()


@pytest.fixture
def species_repository(database_service: DatabaseService) -> SpeciesRepository:
    """Provide a SpeciesRepository over the temp database."""
    return SpeciesRepository(database_service)


@pytest.fixture
def account_service(database_service: DatabaseService) -> AccountService:
    """Provide an AccountService over the temp database."""
    return AccountService(database_service)


@pytest.fixture
def species_factory():
    """Create unsaved Species instances with sensible defaults.

    Example:
        species = species_factory(id=3, author="account-id")
    """

    def _create_species(**kwargs) -> Species:
        defaults = {
            "id": 1,
            "scientific_name": "Cavia porcellus",
            "common_name": "Guinea pig",
            "kingdom": Kingdom.ANIMALIA,
            "total_population": 300000,
            "image": None,
            "description": "A species of rodent.",
            "author": None,
        }
        defaults.update(kwargs)
        return Species(**defaults)

    return _create_species


@pytest.fixture
def species_formdata():
    """Build form submissions as the browser would post them (every value a string)."""

    def _create_formdata(**kwargs) -> dict[str, str]:
        data = {
            "scientific_name": "Acinonyx jubatus",
            "common_name": "Cheetah",
            "kingdom": "Animalia",
            "total_population": "7000",
            "image": "https://example.com/cheetah.jpg",
            "description": "The fastest land animal.",
        }
        data.update(kwargs)
        return data

    return _create_formdata


class _MultiDict(dict):
    """Dict with the getlist() interface WTForms reads form data through."""

    def getlist(self, key):
        return [self[key]] if key in self else []


@pytest.fixture
def multidict():
    """Wrap a plain dict so it can be passed to a WTForms form as formdata."""
    return _MultiDict


@pytest.fixture
async def app_with_temp_data(path_resolver):
    """Create FastAPI app with isolated paths and a seeded database.

    The database holds two accounts (``author@example.com`` and
    ``other@example.com``, both with password ``testpassword``) and three
    species: one owned by each account and one with no author. Ids are
    exposed on ``app.test_data``.

    IMPORTANT: We must override the Container providers BEFORE creating the app
    because create_app() reads the config while building the middleware stack.
    """
    Container.path_resolver.override(providers.Singleton(lambda: path_resolver))
    Container.database_path.override(providers.Factory(lambda: path_resolver.get_database_path()))

    # Create a test config using our ConfigManager with test path_resolver
    test_config = ConfigManager(path_resolver).load()
    Container.config.override(providers.Singleton(lambda: test_config))

    temp_db_service = DatabaseService(path_resolver.get_database_path())
    await temp_db_service.initialize()

    accounts = AccountService(temp_db_service)
    author = await accounts.register(AUTHOR_EMAIL, TEST_PASSWORD, "Author")
    other = await accounts.register(OTHER_EMAIL, TEST_PASSWORD)

    repository = SpeciesRepository(temp_db_service)
    authored = await repository.create_species(
        author.id,
        SpeciesValues(
            scientific_name="Cavia porcellus",
            common_name="Guinea pig",
            kingdom=Kingdom.ANIMALIA,
            total_population=300000,
            description="A species of rodent.",
        ),
    )
    foreign = await repository.create_species(
        other.id,
        SpeciesValues(scientific_name="Quercus robur", common_name="English oak", kingdom="Plantae"),
    )
    unowned = await repository.create_species(
        None, SpeciesValues(scientific_name="Amanita muscaria", kingdom="Fungi")
    )

    # Connections opened on this event loop must not be reused by the
    # TestClient, which runs the app on its own loop
    await temp_db_service.async_engine.dispose()

    Container.core_database.override(providers.Singleton(lambda: temp_db_service))

    # Mock the redis client to avoid event loop closure issues during test teardown
    mock_redis = AsyncMock(spec=redis.asyncio.Redis)
    Container.redis_client.override(providers.Singleton(lambda: mock_redis))

    app = create_app()
    app.test_data = {  # type: ignore[attr-defined]
        "author_id": author.id,
        "other_id": other.id,
        "authored_species_id": authored.id,
        "foreign_species_id": foreign.id,
        "unowned_species_id": unowned.id,
    }

    yield app

    await temp_db_service.dispose()

    # Reset container overrides
    Container.path_resolver.reset_override()
    Container.database_path.reset_override()
    Container.config.reset_override()
    Container.core_database.reset_override()
    Container.redis_client.reset_override()


@pytest.fixture
def authenticate_sync_client():
    """Provide a function to sign a sync TestClient in.

    Returns:
        A callable that takes a TestClient (and optionally an email) and
        signs it in with the test password

    Example:
        def test_something(authenticate_sync_client):
            client = TestClient(app)
            authenticate_sync_client(client, "other@example.com")
    """

    def _authenticate(client: TestClient, email: str = AUTHOR_EMAIL) -> TestClient:
        login_response = client.post(
            "/login",
            data={"email": email, "password": TEST_PASSWORD},
            follow_redirects=False,
        )
        assert login_response.status_code == 303  # Successful login redirects
        return client

    return _authenticate


@pytest.fixture
def client(app_with_temp_data):
    """Create an anonymous test client with the app lifespan running."""
    with TestClient(app_with_temp_data) as client:
        yield client


@pytest.fixture
def authenticated_client(app_with_temp_data, authenticate_sync_client):
    """Create a test client signed in as ``author@example.com``.

    Example:
        def test_protected_route(authenticated_client):
            response = authenticated_client.get("/species")
            assert response.status_code == 200
    """
    with TestClient(app_with_temp_data) as client:
        authenticate_sync_client(client)
        yield client
