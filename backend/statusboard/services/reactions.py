"""Reactions: Thanks and EyesWanted flows.

Invariants:
    - At most one Thanks and one EyesWanted per (user, update); checked with a
      find before every insert and backed by the store's unique constraint
    - Giving a duplicate Thanks is a conflict; flagging EyesWanted twice is a no-op
    - Only participants of the update's project may react or be flagged
"""

import logging
import uuid

from statusboard.core.domain_types import EyesWantedId, ThanksId, UpdateId, UserId
from statusboard.core.errors import (
    DuplicateRecordError, PermissionDeniedError, ResourceNotFoundError,
)
from statusboard.core.records import (
    EyesWantedRecord, ProjectRecord, ThanksRecord, UpdateRecord,
)
from statusboard.core.repository_protocols import StoreSet

logger = logging.getLogger(__name__)


class ReactionService:
    def __init__(self, stores: StoreSet):
        self.stores = stores

    # --- Thanks -------------------------------------------------------------

    async def give_thanks(self, update_id: UpdateId, user_id: UserId) -> ThanksRecord:
        await self._update_in_reach(update_id, user_id)
        existing = await self.stores.thanks.find_many(
            {"post_user_id": user_id, "update_id": update_id},
        )
        if existing:
            raise DuplicateRecordError(
                "Thanks", f"user {user_id} on update {update_id}",
            )
        return await self.stores.thanks.insert(ThanksRecord(
            id=ThanksId(uuid.uuid4()), post_user_id=user_id, update_id=update_id,
        ))

    async def take_back_thanks(self, update_id: UpdateId, user_id: UserId) -> int:
        return await self.stores.thanks.delete_many(
            {"post_user_id": user_id, "update_id": update_id},
        )

    async def list_thanks(self, update_id: UpdateId, viewer_id: UserId) -> list[ThanksRecord]:
        await self._update_in_reach(update_id, viewer_id)
        return await self.stores.thanks.find_many({"update_id": update_id})

    # --- EyesWanted ---------------------------------------------------------

    async def request_eyes(
        self, update_id: UpdateId, requester_id: UserId, target_id: UserId,
    ) -> EyesWantedRecord:
        update, project = await self._update_in_reach(update_id, requester_id)
        if not project.has_participant(target_id):
            raise PermissionDeniedError(
                "Only participants of the project can be asked to look at an update.",
            )
        return await self.flag(target_id, update.id)

    async def clear_eyes(self, update_id: UpdateId, user_id: UserId) -> int:
        return await self.stores.eyes_wanted.delete_many(
            {"user_id": user_id, "update_id": update_id},
        )

    async def eyes_wanted_for(self, user_id: UserId) -> list[EyesWantedRecord]:
        return await self.stores.eyes_wanted.find_many({"user_id": user_id})

    async def flag(self, user_id: UserId, update_id: UpdateId) -> EyesWantedRecord:
        """Idempotent find-then-insert of one EyesWanted flag."""
        key = {"user_id": user_id, "update_id": update_id}
        existing = await self.stores.eyes_wanted.find_many(key)
        if existing:
            return existing[0]
        try:
            return await self.stores.eyes_wanted.insert(EyesWantedRecord(
                id=EyesWantedId(uuid.uuid4()), user_id=user_id, update_id=update_id,
            ))
        except DuplicateRecordError:
            # lost a race with a concurrent flag of the same pair
            return (await self.stores.eyes_wanted.find_many(key))[0]

    async def flag_participants(self, update: UpdateRecord, project: ProjectRecord) -> int:
        """Flag every participant except the author on a new update."""
        targets = [u for u in project.participant_ids if u != update.author_id]
        for user_id in targets:
            await self.flag(user_id, update.id)
        return len(targets)

    async def flag_all_in_project(self, user_id: UserId, project: ProjectRecord) -> int:
        """Flag a newly joined participant on every existing update of the project."""
        updates = await self.stores.updates.find_many({"project_id": project.id})
        for update in updates:
            await self.flag(user_id, update.id)
        return len(updates)

    # --- helpers ------------------------------------------------------------

    async def _update_in_reach(
        self, update_id: UpdateId, user_id: UserId,
    ) -> tuple[UpdateRecord, ProjectRecord]:
        update = await self.stores.updates.find(update_id)
        if update is None:
            raise ResourceNotFoundError("Update", str(update_id))
        project = await self.stores.projects.find(update.project_id)
        if project is None:
            raise ResourceNotFoundError("Project", str(update.project_id))
        if not project.has_participant(user_id):
            raise PermissionDeniedError("You are not a participant of this project.")
        return update, project
