"""Integration tests for wallet, ads and withdrawal review (requires PG + Redis).

Pre-condition: PostgreSQL + Redis running and `alembic upgrade head` applied.

Uses the session-scoped client fixture from tests/integration/conftest.py.
All tests share one event loop; avoids asyncpg pool cross-loop errors.
"""

import asyncio
from collections.abc import Awaitable, Callable

import pytest
from httpx import AsyncClient

Register = Callable[[], Awaitable[tuple[str, dict[str, str]]]]

pytestmark = pytest.mark.asyncio(loop_scope="session")


async def _balance(client: AsyncClient, headers: dict[str, str]) -> int:
    resp = await client.get("/api/v1/wallet/balance", headers=headers)
    return int(resp.json()["data"]["balance_micros"])


class TestWallet:
    async def test_new_user_has_zero_balance(
        self, client: AsyncClient, register: Register
    ) -> None:
        _, headers = await register()
        assert await _balance(client, headers) == 0

    async def test_deposit_then_withdraw_restores_balance(
        self, client: AsyncClient, register: Register
    ) -> None:
        _, headers = await register()

        dep = await client.post(
            "/api/v1/wallet/deposit", json={"amount": "100", "network": "TRC20"}, headers=headers
        )
        assert dep.status_code == 200
        assert dep.json()["data"]["transaction"]["tx_hash"].startswith("DEP-")

        wd = await client.post(
            "/api/v1/wallet/withdraw", json={"amount": "100", "network": "TRC20"}, headers=headers
        )
        assert wd.status_code == 200
        assert await _balance(client, headers) == 0

        txs = await client.get("/api/v1/wallet/transactions", headers=headers)
        kinds = sorted((t["kind"], t["status"]) for t in txs.json()["data"]["items"])
        assert kinds == [("DEPOSIT", "COMPLETED"), ("WITHDRAW", "PENDING")]

    async def test_overdraft_is_rejected(self, client: AsyncClient, register: Register) -> None:
        _, headers = await register()
        await client.post("/api/v1/wallet/deposit", json={"amount": "60"}, headers=headers)

        resp = await client.post("/api/v1/wallet/withdraw", json={"amount": "61"}, headers=headers)

        assert resp.status_code == 422
        assert resp.json()["code"] == 2001
        assert await _balance(client, headers) == 60_000_000

    async def test_concurrent_withdrawals_never_overdraw(
        self, client: AsyncClient, register: Register
    ) -> None:
        _, headers = await register()
        await client.post("/api/v1/wallet/deposit", json={"amount": "100"}, headers=headers)

        results = await asyncio.gather(
            *(
                client.post("/api/v1/wallet/withdraw", json={"amount": "60"}, headers=headers)
                for _ in range(3)
            )
        )

        codes = sorted(r.status_code for r in results)
        assert codes == [200, 422, 422]
        assert await _balance(client, headers) == 40_000_000


class TestSponsor:
    async def test_sponsor_boosts_views(self, client: AsyncClient, register: Register) -> None:
        _, headers = await register()
        await client.post("/api/v1/wallet/deposit", json={"amount": "10"}, headers=headers)
        post = await client.post("/api/v1/posts", json={"content": "buy my ebook"}, headers=headers)
        post_id = post.json()["data"]["id"]

        resp = await client.post(
            f"/api/v1/ads/posts/{post_id}/sponsor", json={"amount": "10"}, headers=headers
        )

        assert resp.status_code == 200
        assert resp.json()["data"]["views_added"] == 10_000
        fetched = (await client.get(f"/api/v1/posts/{post_id}", headers=headers)).json()["data"]
        assert fetched["sponsored"] is True
        assert fetched["views"] == 10_000
        campaigns = await client.get("/api/v1/ads/campaigns", headers=headers)
        assert campaigns.json()["data"][0]["post_id"] == post_id


class TestWithdrawalReview:
    async def test_reject_refunds_once(
        self, client: AsyncClient, register: Register, promote_to_admin
    ) -> None:
        user_id, headers = await register()
        admin_id, admin_headers = await register()
        await promote_to_admin(admin_id)
        await client.post("/api/v1/wallet/deposit", json={"amount": "80"}, headers=headers)
        wd = await client.post("/api/v1/wallet/withdraw", json={"amount": "50"}, headers=headers)
        tx_id = wd.json()["data"]["transaction"]["id"]

        first = await client.post(
            f"/api/v1/admin/withdrawals/{tx_id}/process",
            json={"approved": False},
            headers=admin_headers,
        )
        second = await client.post(
            f"/api/v1/admin/withdrawals/{tx_id}/process",
            json={"approved": False},
            headers=admin_headers,
        )

        assert first.status_code == 200
        assert first.json()["data"]["refunded_micros"] == 50_000_000
        assert second.status_code == 409
        assert second.json()["code"] == 2003
        assert await _balance(client, headers) == 80_000_000

        report = await client.get(
            "/api/v1/admin/ledger/reconcile", params={"user_id": user_id}, headers=admin_headers
        )
        assert report.json()["data"]["ok"] is True

    async def test_non_admin_cannot_review(self, client: AsyncClient, register: Register) -> None:
        _, headers = await register()
        resp = await client.get("/api/v1/admin/withdrawals/pending", headers=headers)
        assert resp.status_code == 403
