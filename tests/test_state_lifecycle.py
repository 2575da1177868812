"""Tests for the wizard state lifecycle manager."""

from uuid import UUID

import pytest

from database.state_lifecycle import APPLY_FLOW_KEY_PREFIX, parse_flow_id
from domain.errors import (
    FlowRestartRequired,
    InvalidIdentifier,
    SessionExpired,
    SessionMissing,
    SubmittedStateImmutable,
)
from domain.state import SubmissionInfoState
from fixtures.wizard_states import FLOW_ID, NOW, dental_benefits

KEY = f"{APPLY_FLOW_KEY_PREFIX}{FLOW_ID}"


class TestParseFlowId:

    def test_accepts_uuid_string(self):
        assert parse_flow_id(str(FLOW_ID)) == FLOW_ID

    def test_accepts_uuid(self):
        assert parse_flow_id(FLOW_ID) is FLOW_ID

    @pytest.mark.parametrize("value", ["", "not-a-uuid", "123", None])
    def test_rejects_anything_else(self, value):
        with pytest.raises(InvalidIdentifier):
            parse_flow_id(value)


class TestStart:

    @pytest.mark.asyncio
    async def test_start_persists_fresh_state(self, apply_manager, http_session):
        state = await apply_manager.start(FLOW_ID, http_session)

        assert state.id == FLOW_ID
        assert state.last_updated_on == NOW
        assert state.edit_mode is False
        assert state.terms_and_conditions is None
        assert await http_session.has(KEY)

    @pytest.mark.asyncio
    async def test_start_replaces_previous_state(self, apply_manager, http_session):
        await apply_manager.start(FLOW_ID, http_session)
        await apply_manager.save(FLOW_ID, http_session, {"has_filed_taxes": True})

        state = await apply_manager.start(FLOW_ID, http_session)

        assert state.has_filed_taxes is None

    @pytest.mark.asyncio
    async def test_start_with_initial_fields(self, apply_manager, http_session):
        state = await apply_manager.start(FLOW_ID, http_session, type_of_application="adult")
        assert state.type_of_application == "adult"

    @pytest.mark.asyncio
    async def test_start_rejects_invalid_id(self, apply_manager, http_session):
        with pytest.raises(InvalidIdentifier):
            await apply_manager.start("abc", http_session)


class TestLoad:

    @pytest.mark.asyncio
    async def test_load_round_trips(self, apply_manager, http_session):
        started = await apply_manager.start(FLOW_ID, http_session)
        loaded = await apply_manager.load(str(FLOW_ID), http_session)
        assert loaded == started

    @pytest.mark.asyncio
    async def test_invalid_id_requires_restart(self, apply_manager, http_session):
        with pytest.raises(FlowRestartRequired) as exc_info:
            await apply_manager.load("not-a-uuid", http_session)

        assert isinstance(exc_info.value, InvalidIdentifier)
        assert exc_info.value.session_key == f"{APPLY_FLOW_KEY_PREFIX}not-a-uuid"

    @pytest.mark.asyncio
    async def test_missing_state(self, apply_manager, http_session):
        with pytest.raises(SessionMissing) as exc_info:
            await apply_manager.load(FLOW_ID, http_session)
        assert exc_info.value.session_key == KEY

    @pytest.mark.asyncio
    async def test_within_timeout(self, apply_manager, http_session, clock):
        await apply_manager.start(FLOW_ID, http_session)
        clock.advance(minutes=19)

        state = await apply_manager.load(FLOW_ID, http_session)

        assert state.id == FLOW_ID

    @pytest.mark.asyncio
    async def test_expired_state_is_deleted(self, apply_manager, http_session, clock):
        await apply_manager.start(FLOW_ID, http_session)
        clock.advance(minutes=21)

        with pytest.raises(SessionExpired):
            await apply_manager.load(FLOW_ID, http_session)

        assert not await http_session.has(KEY)
        with pytest.raises(SessionMissing):
            await apply_manager.load(FLOW_ID, http_session)

    @pytest.mark.asyncio
    async def test_expires_at_exact_timeout(self, apply_manager, http_session, clock):
        await apply_manager.start(FLOW_ID, http_session)
        clock.advance(minutes=20)

        with pytest.raises(SessionExpired):
            await apply_manager.load(FLOW_ID, http_session)

    @pytest.mark.asyncio
    async def test_save_refreshes_inactivity_window(self, apply_manager, http_session, clock):
        await apply_manager.start(FLOW_ID, http_session)
        clock.advance(minutes=15)
        await apply_manager.save(FLOW_ID, http_session, {"has_filed_taxes": True})
        clock.advance(minutes=15)

        state = await apply_manager.load(FLOW_ID, http_session)

        assert state.has_filed_taxes is True

    @pytest.mark.asyncio
    async def test_unreadable_payload_is_discarded(self, apply_manager, http_session):
        await http_session.set(KEY, b'{"id": "garbage"}')

        with pytest.raises(SessionMissing):
            await apply_manager.load(FLOW_ID, http_session)

        assert not await http_session.has(KEY)


class TestSave:

    @pytest.mark.asyncio
    async def test_shallow_merge(self, apply_manager, http_session, clock):
        await apply_manager.start(FLOW_ID, http_session)
        await apply_manager.save(FLOW_ID, http_session, {"has_filed_taxes": True})
        clock.advance(minutes=1)

        state = await apply_manager.save(FLOW_ID, http_session, {"marital_status": "single"})

        assert state.has_filed_taxes is True
        assert state.marital_status == "single"
        assert state.last_updated_on == clock.now

    @pytest.mark.asyncio
    async def test_repeated_save_is_idempotent(self, apply_manager, http_session, clock):
        await apply_manager.start(FLOW_ID, http_session)
        partial = {"has_filed_taxes": True, "dental_benefits": dental_benefits()}

        first = await apply_manager.save(FLOW_ID, http_session, partial)
        clock.advance(minutes=1)
        second = await apply_manager.save(FLOW_ID, http_session, partial)

        assert second.last_updated_on > first.last_updated_on
        assert second.model_dump(exclude={"last_updated_on"}) == first.model_dump(exclude={"last_updated_on"})

    @pytest.mark.asyncio
    async def test_last_write_wins_across_tabs(self, apply_manager, http_session):
        await apply_manager.start(FLOW_ID, http_session)
        first_tab = await apply_manager.load(FLOW_ID, http_session)
        second_tab = await apply_manager.load(FLOW_ID, http_session)

        await apply_manager.save(first_tab.id, http_session, {"marital_status": "single"})
        state = await apply_manager.save(second_tab.id, http_session, {"marital_status": "married"})

        assert state.marital_status == "married"
        assert (await apply_manager.load(FLOW_ID, http_session)).marital_status == "married"

    @pytest.mark.asyncio
    async def test_returns_new_snapshot(self, apply_manager, http_session):
        original = await apply_manager.start(FLOW_ID, http_session)
        saved = await apply_manager.save(FLOW_ID, http_session, {"has_filed_taxes": False})

        assert original.has_filed_taxes is None
        assert saved is not original

    @pytest.mark.asyncio
    async def test_fields_to_remove(self, apply_manager, http_session):
        await apply_manager.start(FLOW_ID, http_session)
        await apply_manager.save(FLOW_ID, http_session, {
            "has_federal_provincial_territorial_benefits": True,
            "dental_benefits": dental_benefits(),
        })

        state = await apply_manager.save(
            FLOW_ID,
            http_session,
            {"has_federal_provincial_territorial_benefits": False},
            fields_to_remove=["dental_benefits"],
        )

        assert state.dental_benefits is None
        reloaded = await apply_manager.load(FLOW_ID, http_session)
        assert reloaded.dental_benefits is None

    @pytest.mark.parametrize("field", ["id", "last_updated_on"])
    @pytest.mark.asyncio
    async def test_lifecycle_fields_rejected(self, apply_manager, http_session, field):
        await apply_manager.start(FLOW_ID, http_session)
        with pytest.raises(ValueError):
            await apply_manager.save(FLOW_ID, http_session, {field: None})

    @pytest.mark.asyncio
    async def test_unknown_field_rejected(self, apply_manager, http_session):
        await apply_manager.start(FLOW_ID, http_session)
        with pytest.raises(ValueError):
            await apply_manager.save(FLOW_ID, http_session, {"favourite_colour": "blue"})

    @pytest.mark.asyncio
    async def test_submitted_state_is_immutable(self, apply_manager, http_session):
        await apply_manager.start(FLOW_ID, http_session)
        await apply_manager.save(FLOW_ID, http_session, {
            "submission_info": SubmissionInfoState(confirmation_code="CONF-1", submitted_on=NOW),
        })

        with pytest.raises(SubmittedStateImmutable):
            await apply_manager.save(FLOW_ID, http_session, {"edit_mode": True})

        state = await apply_manager.load(FLOW_ID, http_session)
        assert state.edit_mode is False
        assert state.is_submitted

    @pytest.mark.asyncio
    async def test_save_without_state(self, apply_manager, http_session):
        with pytest.raises(SessionMissing):
            await apply_manager.save(FLOW_ID, http_session, {"has_filed_taxes": True})


class TestClear:

    @pytest.mark.asyncio
    async def test_clear_removes_state(self, apply_manager, http_session):
        await apply_manager.start(FLOW_ID, http_session)
        await apply_manager.clear(FLOW_ID, http_session)

        with pytest.raises(SessionMissing):
            await apply_manager.load(FLOW_ID, http_session)

    @pytest.mark.asyncio
    async def test_clear_is_idempotent(self, apply_manager, http_session):
        await apply_manager.clear(FLOW_ID, http_session)
        await apply_manager.clear(FLOW_ID, http_session)

    @pytest.mark.asyncio
    async def test_flows_are_independent(self, apply_manager, http_session):
        other = UUID("0b6f7c3e-2f1d-4d0a-8e8b-9a7c6d5e4f30")
        await apply_manager.start(FLOW_ID, http_session)
        await apply_manager.start(other, http_session)

        await apply_manager.clear(FLOW_ID, http_session)

        assert (await apply_manager.load(other, http_session)).id == other
