"""HTTP-level tests against the FastAPI app (no database, no lifespan)."""

from unittest.mock import AsyncMock

import pytest
from httpx import AsyncClient
from sqlalchemy.exc import DataError, ProgrammingError

from src.main import app
from src.tf_common.database import get_db_session
from src.tf_gateway.auth.dependencies import get_current_profile
from src.tf_ledger.application.schemas import BalanceResponse
from src.tf_profile.domain.models import Profile
from src.tf_settings.application.service import settings_cache
from src.tf_settings.domain.models import SiteSettings

ALICE = Profile(id="alice", email="alice@example.com", role="USER", balance=0)


class _DriverError(Exception):
    def __init__(self, message: str, sqlstate: str) -> None:
        super().__init__(message)
        self.sqlstate = sqlstate


async def _fake_db():
    yield AsyncMock()


@pytest.fixture
def as_alice():
    app.dependency_overrides[get_current_profile] = lambda: ALICE
    app.dependency_overrides[get_db_session] = _fake_db
    yield
    app.dependency_overrides.clear()


class TestAuthRequired:
    async def test_wallet_without_token(self, client: AsyncClient) -> None:
        resp = await client.get("/api/v1/wallet/balance")
        assert resp.status_code == 401

    async def test_garbage_token(self, client: AsyncClient) -> None:
        resp = await client.get(
            "/api/v1/notifications", headers={"Authorization": "Bearer not-a-jwt"}
        )
        assert resp.status_code == 401


class TestWallet:
    async def test_balance_envelope(
        self, client: AsyncClient, as_alice, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        fake = AsyncMock()
        fake.get_balance.return_value = BalanceResponse.from_micros("alice", 12_340_000)
        monkeypatch.setattr("src.tf_ledger.api.router._service", fake)

        resp = await client.get("/api/v1/wallet/balance")

        body = resp.json()
        assert resp.status_code == 200
        assert body["code"] == 0
        assert body["data"]["balance_display"] == "12.34 USDT"
        assert resp.headers["X-Request-ID"] == body["request_id"]

    @pytest.mark.parametrize("amount", ["0.0000001", "0", "-5", "9000000000000.000001", "1e20"])
    async def test_deposit_amount_validation(
        self, client: AsyncClient, as_alice, amount: str
    ) -> None:
        resp = await client.post("/api/v1/wallet/deposit", json={"amount": amount})
        assert resp.status_code == 422

    async def test_unknown_network_rejected(self, client: AsyncClient, as_alice) -> None:
        resp = await client.post(
            "/api/v1/wallet/deposit", json={"amount": "5", "network": "SOLANA"}
        )
        assert resp.status_code == 422


class TestAdminGuard:
    async def test_non_admin_gets_1007(self, client: AsyncClient, as_alice) -> None:
        resp = await client.get("/api/v1/admin/users")

        assert resp.status_code == 403
        assert resp.json()["code"] == 1007


class TestSettings:
    async def test_public_settings(self, client: AsyncClient, as_alice) -> None:
        settings_cache.replace(SiteSettings())

        resp = await client.get("/api/v1/settings")

        data = resp.json()["data"]
        assert resp.status_code == 200
        assert data["site_name"] == "TextFlow"
        assert data["min_withdraw_micros"] == 50_000_000
        assert data["sponsor_price_per_1k_display"] == "1.000000 USDT"


class TestDatabaseErrors:
    async def test_malformed_identifier_is_422(
        self, client: AsyncClient, as_alice, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        fake = AsyncMock()
        fake.get_public.side_effect = DataError(
            "SELECT ...", {}, _DriverError("invalid input syntax for type uuid", "22P02")
        )
        monkeypatch.setattr("src.tf_profile.api.router._service", fake)

        resp = await client.get("/api/v1/profiles/not-a-uuid")

        assert resp.status_code == 422
        assert resp.json()["code"] == 9005

    async def test_missing_schema_is_503(
        self, client: AsyncClient, as_alice, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        fake = AsyncMock()
        fake.get_public.side_effect = ProgrammingError(
            "SELECT ...", {}, _DriverError('relation "profiles" does not exist', "42P01")
        )
        monkeypatch.setattr("src.tf_profile.api.router._service", fake)

        resp = await client.get("/api/v1/profiles/alice")

        assert resp.status_code == 503
        assert resp.json()["code"] == 9003
