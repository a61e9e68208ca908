"""Tests for collection API endpoints."""

from decimal import Decimal
from unittest.mock import AsyncMock

import pytest
from conftest import AUTH_HEADERS, SeedItems, SeedPrices, SeedRates
from httpx import AsyncClient
from sqlalchemy.exc import OperationalError


class TestCollectionValue:
    async def test_empty_collection(self, client: AsyncClient) -> None:
        response = await client.get("/collection/value", headers=AUTH_HEADERS)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["totalDistinctCards"] == 0
        assert data["totalQuantity"] == 0
        assert data["totalValue"] == "0.00"
        assert data["pricingSource"] == "cardmarket"
        assert data["currency"] == "EUR"

    async def test_unpriced_card_counts_without_value(
        self, client: AsyncClient, seed_items: SeedItems, seed_prices: SeedPrices
    ) -> None:
        """Card B has no cardmarket price, so it is counted but worth nothing."""
        await seed_items([("A", "holofoil", 3), ("A", "normal", 2), ("B", "normal", 1)])
        await seed_prices([("A", "cardmarket", "1.25", None), ("B", "tcgplayer", "4.00", None)])

        response = await client.get("/collection/value", headers=AUTH_HEADERS)

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        data = body["data"]
        assert data["totalDistinctCards"] == 2
        assert data["totalQuantity"] == 6
        assert data["totalValue"] == "6.25"
        assert data["metadata"]["pricedCards"] == 1
        assert data["metadata"]["rowsScanned"] == 3
        assert data["metadata"]["fetchedAt"] is not None

    async def test_tcgplayer_source(
        self, client: AsyncClient, seed_items: SeedItems, seed_prices: SeedPrices
    ) -> None:
        await seed_items([("A", "normal", 2), ("B", "normal", 1)])
        await seed_prices([("A", "cardmarket", "1.25", None)])
        await seed_prices([("B", "tcgplayer", "4.00", None)], currency="USD")

        response = await client.get("/collection/value?source=tcgplayer", headers=AUTH_HEADERS)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["pricingSource"] == "tcgplayer"
        assert data["currency"] == "USD"
        assert data["totalValue"] == "4.00"
        assert data["totalDistinctCards"] == 2

    async def test_source_is_case_insensitive(self, client: AsyncClient) -> None:
        response = await client.get("/collection/value?source=TCGPlayer", headers=AUTH_HEADERS)

        assert response.status_code == 200
        assert response.json()["data"]["pricingSource"] == "tcgplayer"

    async def test_unknown_source_rejected(self, client: AsyncClient) -> None:
        response = await client.get("/collection/value?source=ebay", headers=AUTH_HEADERS)

        assert response.status_code == 400
        body = response.json()
        assert "ebay" in body["error"]
        assert "cardmarket" in body["error"]

    async def test_converts_to_requested_currency(
        self,
        client: AsyncClient,
        seed_items: SeedItems,
        seed_prices: SeedPrices,
        seed_rates: SeedRates,
    ) -> None:
        await seed_items([("A", "normal", 5)])
        await seed_prices([("A", "cardmarket", "1.25", None)])
        await seed_rates([("EUR", "NOK", "11.50")])

        response = await client.get("/collection/value?currency=nok", headers=AUTH_HEADERS)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["currency"] == "NOK"
        # 6.25 * 11.5 = 71.875
        assert data["totalValue"] == "71.88"
        assert data["originalValue"] == "6.25"
        assert data["originalCurrency"] == "EUR"
        assert Decimal(data["conversionRate"]) == Decimal("11.5")

    async def test_missing_rate_returns_unconverted(
        self, client: AsyncClient, seed_items: SeedItems, seed_prices: SeedPrices
    ) -> None:
        await seed_items([("A", "normal", 5)])
        await seed_prices([("A", "cardmarket", "1.25", None)])

        response = await client.get("/collection/value?currency=GBP", headers=AUTH_HEADERS)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["currency"] == "EUR"
        assert data["totalValue"] == "6.25"
        assert "originalValue" not in data
        assert "conversionRate" not in data

    async def test_unsupported_currency_rejected(self, client: AsyncClient) -> None:
        response = await client.get("/collection/value?currency=JPY", headers=AUTH_HEADERS)

        assert response.status_code == 400
        assert "JPY" in response.json()["error"]

    async def test_requires_authentication(self, client: AsyncClient) -> None:
        response = await client.get("/collection/value")

        assert response.status_code == 401

    async def test_storage_failure_is_reported(
        self, client: AsyncClient, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(
            "variantvault.services.collection_aggregator.fetch_holdings",
            AsyncMock(side_effect=OperationalError("SELECT", {}, Exception("db down"))),
        )

        response = await client.get("/collection/value", headers=AUTH_HEADERS)

        assert response.status_code == 503
        body = response.json()
        assert body["error"] == "Collection data is temporarily unavailable"
        assert "db down" not in response.text


class TestOwnedCards:
    async def test_lists_cards(self, client: AsyncClient, seed_items: SeedItems) -> None:
        await seed_items([("A", "holofoil", 3), ("A", "unlimited", 1), ("B", "normal", 0)])

        response = await client.get("/collection/cards", headers=AUTH_HEADERS)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["totalCards"] == 1
        assert data["totalQuantity"] == 4
        card = data["cards"][0]
        assert card["cardId"] == "A"
        assert card["quantities"] == {"normal": 1, "holo": 3}
        assert card["totalOwned"] == 4

    async def test_empty(self, client: AsyncClient) -> None:
        response = await client.get("/collection/cards", headers=AUTH_HEADERS)

        assert response.status_code == 200
        assert response.json()["data"] == {"cards": [], "totalCards": 0, "totalQuantity": 0}

    async def test_requires_authentication(self, client: AsyncClient) -> None:
        response = await client.get("/collection/cards")

        assert response.status_code == 401
