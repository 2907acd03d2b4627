"""Unit tests for SiteSettings, SettingsCache and the settings service."""

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
from pydantic import ValidationError
from sqlalchemy.exc import ProgrammingError

from src.tf_settings.application.schemas import SettingsResponse, UpdateSettingsRequest
from src.tf_settings.application.service import SettingsApplicationService
from src.tf_settings.domain.cache import SettingsCache
from src.tf_settings.domain.models import SiteSettings


class _UndefinedTable(Exception):
    sqlstate = "42P01"


def _missing_table_error() -> ProgrammingError:
    return ProgrammingError("SELECT ... FROM settings", {}, _UndefinedTable("relation missing"))


class TestSiteSettings:
    def test_defaults(self) -> None:
        s = SiteSettings()
        assert s.site_name == "TextFlow"
        assert s.creator_rate_per_100k == 100_000
        assert s.sponsor_price_per_1k == 1_000_000
        assert s.min_withdraw == 50_000_000
        assert s.enable_direct_messaging is True

    def test_merged_ignores_none_and_unknown_keys(self) -> None:
        s = SiteSettings().merged({"site_name": "Other", "min_withdraw": None, "bogus": 1})
        assert s.site_name == "Other"
        assert s.min_withdraw == 50_000_000
        assert not hasattr(s, "bogus")


class TestSettingsCache:
    async def test_load_uses_stored_row(self) -> None:
        source = AsyncMock()
        source.get.return_value = SiteSettings(site_name="Stored")
        cache = SettingsCache(source)

        await cache.load(AsyncMock())

        assert cache.loaded
        assert cache.get().site_name == "Stored"

    async def test_load_missing_row_keeps_defaults(self) -> None:
        source = AsyncMock()
        source.get.return_value = None
        cache = SettingsCache(source)

        await cache.load(AsyncMock())

        assert cache.loaded
        assert cache.get() == SiteSettings()

    async def test_load_missing_table_keeps_defaults(self) -> None:
        source = AsyncMock()
        source.get.side_effect = _missing_table_error()
        cache = SettingsCache(source)
        db = AsyncMock()

        await cache.load(db)

        assert cache.get() == SiteSettings()
        db.rollback.assert_awaited_once()

    async def test_refresh_propagates_missing_table(self) -> None:
        source = AsyncMock()
        source.get.side_effect = _missing_table_error()
        with pytest.raises(ProgrammingError):
            await SettingsCache(source).refresh(AsyncMock())

    def test_replace_marks_loaded(self) -> None:
        cache = SettingsCache(AsyncMock())
        cache.replace(SiteSettings(min_withdraw=1))
        assert cache.loaded
        assert cache.get().min_withdraw == 1


class TestUpdateSettingsRequest:
    def test_amounts_converted_to_micros(self) -> None:
        body = UpdateSettingsRequest(
            sponsor_price_per_1k=Decimal("2.5"), creator_rate_per_100k=Decimal("0")
        )
        assert body.to_updates() == {"sponsor_price_per_1k": 2_500_000, "creator_rate_per_100k": 0}

    def test_sponsor_price_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            UpdateSettingsRequest(sponsor_price_per_1k=Decimal("0"))

    def test_rates_cannot_be_negative(self) -> None:
        with pytest.raises(ValidationError):
            UpdateSettingsRequest(min_withdraw=Decimal("-1"))


class TestSettingsService:
    async def test_update_upserts_merges_and_replaces_cache(self) -> None:
        repo = AsyncMock()
        repo.get.return_value = SiteSettings(site_name="Before")
        repo.upsert.side_effect = lambda db, new: new
        cache = SettingsCache(AsyncMock())
        svc = SettingsApplicationService(repo=repo, cache=cache)
        db = AsyncMock()

        result = await svc.update_settings(
            db, UpdateSettingsRequest(enable_direct_messaging=False)
        )

        stored = repo.upsert.call_args.args[1]
        assert stored.site_name == "Before"
        assert stored.enable_direct_messaging is False
        assert cache.get() is stored
        assert isinstance(result, SettingsResponse)
        db.commit.assert_awaited_once()

    async def test_update_failure_rolls_back_and_keeps_cache(self) -> None:
        repo = AsyncMock()
        repo.get.return_value = None
        repo.upsert.side_effect = RuntimeError("boom")
        cache = SettingsCache(AsyncMock())
        svc = SettingsApplicationService(repo=repo, cache=cache)
        db = AsyncMock()

        with pytest.raises(RuntimeError):
            await svc.update_settings(db, UpdateSettingsRequest(site_name="X"))

        db.rollback.assert_awaited_once()
        assert cache.get().site_name == "TextFlow"

    async def test_get_loads_lazily(self) -> None:
        source = AsyncMock()
        source.get.return_value = SiteSettings(site_name="Lazy")
        cache = SettingsCache(source)
        svc = SettingsApplicationService(repo=MagicMock(), cache=cache)

        result = await svc.get_settings(AsyncMock())

        assert result.site_name == "Lazy"
        assert result.sponsor_price_per_1k_display == "1.000000 USDT"
