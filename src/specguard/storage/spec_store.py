"""Spec store — durable create/read/update/list/delete of plans."""

from __future__ import annotations

import logging
from typing import Protocol

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from specguard.db.models import SpecRecord
from specguard.models.spec import (
    Phase,
    PhaseStatus,
    Spec,
    SpecCreate,
    SpecStatus,
    SpecUpdate,
    generate_id,
    utcnow,
)

logger = logging.getLogger(__name__)


class SpecStore(Protocol):
    """Keyed plan storage consumed by the verifier, CLI and HTTP layer."""

    async def get(self, spec_id: str) -> Spec | None: ...

    async def list(self, status: SpecStatus | None = None) -> list[Spec]: ...

    async def create(self, data: SpecCreate) -> Spec: ...

    async def update(self, spec_id: str, changes: SpecUpdate) -> Spec | None: ...

    async def delete(self, spec_id: str) -> bool: ...


def _to_spec(record: SpecRecord) -> Spec:
    return Spec.model_validate(record)


class SqlSpecStore:
    """SpecStore backed by the ``specs`` table.

    Every method opens its own session, so a returned ``Spec`` is a detached
    snapshot; later writes to the store are not reflected in it.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get(self, spec_id: str) -> Spec | None:
        async with self._session_factory() as session:
            record = await session.get(SpecRecord, spec_id)
            return _to_spec(record) if record else None

    async def list(self, status: SpecStatus | None = None) -> list[Spec]:
        """Return specs, most recently updated first."""
        query = select(SpecRecord).order_by(SpecRecord.updated_at.desc())
        if status is not None:
            query = query.where(SpecRecord.status == status.value)
        async with self._session_factory() as session:
            result = await session.execute(query)
            return [_to_spec(r) for r in result.scalars().all()]

    async def get_active(self) -> Spec | None:
        """The most recently updated spec with status ``active``."""
        active = await self.list(SpecStatus.ACTIVE)
        return active[0] if active else None

    async def create(self, data: SpecCreate) -> Spec:
        now = utcnow()
        record = SpecRecord(
            id=generate_id(),
            title=data.title,
            description=data.description,
            status=SpecStatus.DRAFT.value,
            goal=data.goal,
            in_scope=list(data.in_scope),
            out_of_scope=list(data.out_of_scope),
            acceptance_criteria=list(data.acceptance_criteria),
            file_boundaries=list(data.file_boundaries),
            phases=[p.model_dump(mode="json") for p in data.phases],
            created_at=now,
            updated_at=now,
        )
        async with self._session_factory() as session:
            session.add(record)
            await session.commit()
        logger.info("Created spec %s (%s)", record.id, record.title)
        return _to_spec(record)

    async def update(self, spec_id: str, changes: SpecUpdate) -> Spec | None:
        """Apply the non-None fields of ``changes``; id and created_at are kept."""
        values = changes.model_dump(mode="json", exclude_none=True)
        async with self._session_factory() as session:
            record = await session.get(SpecRecord, spec_id)
            if record is None:
                return None
            for name, value in values.items():
                setattr(record, name, value)
            record.updated_at = utcnow()
            await session.commit()
            return _to_spec(record)

    async def delete(self, spec_id: str) -> bool:
        async with self._session_factory() as session:
            result = await session.execute(
                delete(SpecRecord).where(SpecRecord.id == spec_id)
            )
            await session.commit()
            return result.rowcount > 0

    async def add_phase(self, spec_id: str, phase: Phase) -> Phase | None:
        async with self._session_factory() as session:
            record = await session.get(SpecRecord, spec_id)
            if record is None:
                return None
            # Reassign rather than append so the JSON column is flagged dirty.
            record.phases = [*record.phases, phase.model_dump(mode="json")]
            record.updated_at = utcnow()
            await session.commit()
        return phase

    async def update_phase_status(
        self, spec_id: str, phase_id: str, status: PhaseStatus
    ) -> bool:
        async with self._session_factory() as session:
            record = await session.get(SpecRecord, spec_id)
            if record is None:
                return False
            if not any(p.get("id") == phase_id for p in record.phases):
                return False
            record.phases = [
                {**p, "status": status.value} if p.get("id") == phase_id else p
                for p in record.phases
            ]
            record.updated_at = utcnow()
            await session.commit()
            return True
