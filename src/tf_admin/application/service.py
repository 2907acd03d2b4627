"""Admin application service — composes the per-module services.

Authorization (require_admin) happens at the router; everything here
assumes an admin caller.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.tf_content.application.schemas import PostItem
from src.tf_content.domain.models import detect_post_type
from src.tf_content.infrastructure.persistence import ContentRepository
from src.tf_ledger.application.schemas import (
    ProcessWithdrawalResponse,
    ReconcileResponse,
    TransactionItem,
)
from src.tf_ledger.application.service import LedgerApplicationService
from src.tf_profile.application.schemas import AdminUpdateUserRequest, ProfileResponse
from src.tf_profile.application.service import ProfileService
from src.tf_profile.domain.models import Profile
from src.tf_seed.generator import SamplePostGenerator
from src.tf_settings.application.schemas import SettingsResponse, UpdateSettingsRequest
from src.tf_settings.application.service import SettingsApplicationService

logger = logging.getLogger(__name__)


class AdminService:
    def __init__(
        self,
        profiles: ProfileService | None = None,
        ledger: LedgerApplicationService | None = None,
        settings_service: SettingsApplicationService | None = None,
        content: ContentRepository | None = None,
        generator: SamplePostGenerator | None = None,
    ) -> None:
        self._profiles = profiles or ProfileService()
        self._ledger = ledger or LedgerApplicationService()
        self._settings = settings_service or SettingsApplicationService()
        self._content = content or ContentRepository()
        self._generator = generator or SamplePostGenerator()

    # --- users ---

    async def list_users(
        self, db: AsyncSession, limit: int, offset: int
    ) -> list[ProfileResponse]:
        return await self._profiles.list_users(db, limit, offset)

    async def update_user(
        self, db: AsyncSession, user_id: str, body: AdminUpdateUserRequest
    ) -> ProfileResponse:
        return await self._profiles.admin_update_user(db, user_id, body)

    async def grant_admin(self, db: AsyncSession, user_id: str) -> ProfileResponse:
        return await self._profiles.grant_admin(db, user_id)

    # --- withdrawals & ledger ---

    async def pending_withdrawals(self, db: AsyncSession, limit: int) -> list[TransactionItem]:
        return await self._ledger.list_pending_withdrawals(db, limit)

    async def process_withdrawal(
        self, db: AsyncSession, tx_id: str, approved: bool
    ) -> ProcessWithdrawalResponse:
        return await self._ledger.process_withdrawal(db, tx_id, approved)

    async def reconcile(self, db: AsyncSession, user_id: str | None) -> ReconcileResponse:
        return await self._ledger.reconcile(db, user_id)

    # --- settings ---

    async def update_settings(
        self, db: AsyncSession, body: UpdateSettingsRequest
    ) -> SettingsResponse:
        return await self._settings.update_settings(db, body)

    # --- sample content ---

    async def publish_sample_posts(self, db: AsyncSession, admin: Profile) -> list[PostItem]:
        """Generate sample posts and publish them, all or none, as `admin`."""
        contents = await self._generator.generate()
        try:
            posts = [
                await self._content.create_post(
                    db, admin.id, content, detect_post_type(content).value
                )
                for content in contents
            ]
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("published %d sample posts as %s", len(posts), admin.id)
        return [PostItem.from_domain(p) for p in posts]
