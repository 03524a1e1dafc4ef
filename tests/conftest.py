"""
Pytest configuration for the cellar pairing tests.
"""

import pytest

from cellar.db import ensure_schema
from cellar.feature_flags import get_feature_flags
from cellar.models.enums import Body, Level, Sweetness, WineType
from cellar.models.wine import CatalogWine, EnrichmentPayload, TastingNotes, WineDescriptor
from cellar.services.catalog_repository import CatalogRepository

TEST_DIMENSIONS = 16


# Configure pytest-asyncio markers
def pytest_configure(config):
    config.addinivalue_line(
        "markers", "asyncio: mark test as an asyncio test"
    )


@pytest.fixture(autouse=True)
def test_env(monkeypatch):
    """Small vectors, mock provider, no real API keys."""
    monkeypatch.setenv("EMBEDDING_DIMENSIONS", str(TEST_DIMENSIONS))
    monkeypatch.setenv("USE_MOCK_EMBEDDINGS", "true")
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("DEGRADE_ON_PROVIDER_ERROR", raising=False)
    get_feature_flags.cache_clear()
    yield
    get_feature_flags.cache_clear()


@pytest.fixture
def make_wine():
    """Factory for CatalogWine test objects."""
    def _make(
        id: int = 1,
        name: str = "Test Wine",
        producer_name: str = "Test Producer",
        vintage=None,
        wine_type=WineType.RED,
        body=None,
        tannin_level=None,
        acidity_level=None,
        sweetness_level=None,
        enrichment=None,
        embedding=None,
        grape=None,
    ) -> CatalogWine:
        return CatalogWine(
            id=id,
            descriptor=WineDescriptor(name=name, producer_name=producer_name, vintage=vintage, grape=grape),
            wine_type=wine_type,
            body=body,
            tannin_level=tannin_level,
            acidity_level=acidity_level,
            sweetness_level=sweetness_level,
            enrichment=enrichment,
            embedding=tuple(embedding) if embedding is not None else None,
        )
    return _make


@pytest.fixture
def rich_enrichment():
    return EnrichmentPayload(
        summary="A structured Cabernet with cassis and cedar.",
        tasting_notes=TastingNotes(nose="Cassis, cedar", palate="Firm tannins", finish="Long"),
        food_pairings=["Grilled steak", "Lamb chops", "Aged cheddar"],
        signature_traits="Power and polish",
        terroir="Gravel soils",
    )


@pytest.fixture
def repo(tmp_path):
    """Catalog repository backed by a temp database with schema applied."""
    db_path = str(tmp_path / "test.db")
    ensure_schema(db_path)
    repository = CatalogRepository(db_path=db_path)
    yield repository
    repository.close()


@pytest.fixture
def seeded_repo(repo, rich_enrichment):
    """Repository with a small cellar for user 'u1'."""
    cab = repo.add_wine(
        WineDescriptor(name="Reserve Cabernet", producer_name="Silver Ridge", vintage=2018,
                       grape="Cabernet Sauvignon"),
        wine_type=WineType.RED,
        enrichment=rich_enrichment,
        body=Body.FULL,
        tannin_level=Level.HIGH,
        acidity_level=Level.MEDIUM,
        sweetness_level=Sweetness.DRY,
    )
    sb = repo.add_wine(
        WineDescriptor(name="Coastal Sauvignon Blanc", producer_name="Blue Bay", vintage=2022,
                       grape="Sauvignon Blanc"),
        wine_type=WineType.WHITE,
        body=Body.LIGHT,
        tannin_level=Level.LOW,
        acidity_level=Level.HIGH,
        sweetness_level=Sweetness.DRY,
    )
    fizz = repo.add_wine(
        WineDescriptor(name="Brut Cuvee", producer_name="Maison Claire"),
        wine_type=WineType.SPARKLING,
        body=Body.LIGHT,
        acidity_level=Level.HIGH,
    )
    repo.add_bottle("u1", cab, quantity=2)
    repo.add_bottle("u1", sb)
    repo.add_bottle("u1", fizz)
    repo.ids = {"cab": cab, "sb": sb, "fizz": fizz}
    return repo
