"""Tests for the SQL-backed plan store."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from specguard.audit.scope import classify_scope
from specguard.models.audit import DiffFile
from specguard.models.spec import Phase, PhaseStatus, SpecCreate, SpecStatus, SpecUpdate


class TestSpecModels:
    def test_create_strips_title_and_items(self) -> None:
        data = SpecCreate(title="  Login  ", in_scope=[" auth ", "", "  "])
        assert data.title == "Login"
        assert data.in_scope == ["auth"]

    def test_blank_title_rejected(self) -> None:
        with pytest.raises(ValidationError):
            SpecCreate(title="   ")

    def test_default_title(self) -> None:
        assert SpecCreate().title == "Untitled Plan"

    def test_unknown_status_rejected(self) -> None:
        with pytest.raises(ValidationError):
            SpecUpdate(status="archived")

    def test_update_blank_title_rejected(self) -> None:
        with pytest.raises(ValidationError):
            SpecUpdate(title="   ")

    def test_update_cleans_items_and_keeps_unset_fields(self) -> None:
        changes = SpecUpdate(out_of_scope=["", " billing ", "  "], file_boundaries=[""])
        assert changes.out_of_scope == ["billing"]
        assert changes.file_boundaries == []
        assert changes.in_scope is None
        assert changes.title is None


class TestSqlSpecStore:
    @pytest.mark.asyncio
    async def test_create_and_get(self, store) -> None:
        created = await store.create(SpecCreate(
            title="Login", goal="Users log in", in_scope=["auth"], file_boundaries=["src/auth"],
        ))
        assert created.status == SpecStatus.DRAFT
        assert len(created.id) == 8

        fetched = await store.get(created.id)
        assert fetched.title == "Login"
        assert fetched.in_scope == ["auth"]
        assert fetched.file_boundaries == ["src/auth"]

    @pytest.mark.asyncio
    async def test_get_missing(self, store) -> None:
        assert await store.get("nope") is None

    @pytest.mark.asyncio
    async def test_list_most_recently_updated_first(self, store) -> None:
        a = await store.create(SpecCreate(title="A"))
        b = await store.create(SpecCreate(title="B"))
        assert [s.id for s in await store.list()] == [b.id, a.id]

        await store.update(a.id, SpecUpdate(goal="touched"))
        assert [s.id for s in await store.list()] == [a.id, b.id]

    @pytest.mark.asyncio
    async def test_list_by_status_and_active(self, store) -> None:
        a = await store.create(SpecCreate(title="A"))
        await store.create(SpecCreate(title="B"))
        assert await store.get_active() is None

        await store.update(a.id, SpecUpdate(status=SpecStatus.ACTIVE))
        assert [s.id for s in await store.list(SpecStatus.ACTIVE)] == [a.id]
        assert (await store.get_active()).id == a.id

    @pytest.mark.asyncio
    async def test_update_keeps_untouched_fields(self, store) -> None:
        created = await store.create(SpecCreate(title="A", goal="g", in_scope=["x"]))
        updated = await store.update(created.id, SpecUpdate(title="B"))
        assert updated.title == "B"
        assert updated.goal == "g"
        assert updated.in_scope == ["x"]
        assert updated.id == created.id

    @pytest.mark.asyncio
    async def test_update_drops_blank_scope_entries(self, store) -> None:
        created = await store.create(SpecCreate(title="A", out_of_scope=["billing"]))
        updated = await store.update(
            created.id, SpecUpdate(out_of_scope=["", "billing"], file_boundaries=["  ", "src/"])
        )
        assert updated.out_of_scope == ["billing"]
        assert updated.file_boundaries == ["src/"]

        violations = classify_scope([DiffFile(path="src/auth/login.py")], updated)
        assert violations == []

    @pytest.mark.asyncio
    async def test_update_missing(self, store) -> None:
        assert await store.update("nope", SpecUpdate(title="B")) is None

    @pytest.mark.asyncio
    async def test_delete(self, store) -> None:
        created = await store.create(SpecCreate(title="A"))
        assert await store.delete(created.id) is True
        assert await store.delete(created.id) is False
        assert await store.get(created.id) is None

    @pytest.mark.asyncio
    async def test_phases(self, store) -> None:
        created = await store.create(SpecCreate(title="A"))
        phase = await store.add_phase(created.id, Phase(title="Backend", tasks=["api", " "]))
        assert phase.tasks == ["api"]

        assert await store.update_phase_status(created.id, phase.id, PhaseStatus.COMPLETED)
        [stored] = (await store.get(created.id)).phases
        assert stored.id == phase.id
        assert stored.status == PhaseStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_phase_on_missing_spec_or_phase(self, store) -> None:
        created = await store.create(SpecCreate(title="A"))
        assert await store.add_phase("nope", Phase()) is None
        assert not await store.update_phase_status("nope", "x", PhaseStatus.COMPLETED)
        assert not await store.update_phase_status(created.id, "x", PhaseStatus.COMPLETED)
