"""
Wizard state lifecycle.

Each flow instance lives in the HTTP session under "{key_prefix}{flow_id}"
(apply-flow-<uuid>, renew-flow-<uuid>, protected-renew-flow-<uuid>). The
manager owns the start/load/save/clear contract:

- flow ids must be UUIDs, anything else forces a restart
- a stored state untouched for the inactivity window is deleted on load
- saves are shallow merges over the latest stored snapshot
- a submitted state is frozen

Concurrent tabs on the same flow are not coordinated: the last save wins.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Generic, Iterable, Mapping, Optional, Type, TypeVar
from uuid import UUID

from pydantic import ValidationError

from config.settings import WizardSettings, get_wizard_settings
from database.session_store import HttpSession
from domain.errors import (
    InvalidIdentifier,
    SessionExpired,
    SessionMissing,
    SubmittedStateImmutable,
)
from domain.state import WizardState
from services.logging_config import flow_id_var, get_logger

logger = get_logger(__name__)

S = TypeVar("S", bound=WizardState)

APPLY_FLOW_KEY_PREFIX = "apply-flow-"
RENEW_FLOW_KEY_PREFIX = "renew-flow-"
PROTECTED_RENEW_FLOW_KEY_PREFIX = "protected-renew-flow-"

# Managed by the lifecycle itself
_PROTECTED_FIELDS = frozenset({"id", "last_updated_on"})


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_flow_id(flow_id: Any) -> UUID:
    """Parse a flow id, raising InvalidIdentifier for anything but a UUID."""
    if isinstance(flow_id, UUID):
        return flow_id
    try:
        return UUID(str(flow_id))
    except (TypeError, ValueError, AttributeError):
        raise InvalidIdentifier(f"Invalid flow id: {flow_id!r}")


class StateLifecycleManager(Generic[S]):
    """
    Start, load, save and clear one kind of wizard state.

    Usage:
        manager = StateLifecycleManager(ApplyState, APPLY_FLOW_KEY_PREFIX)
        state = await manager.start(flow_id, session)
        state = await manager.save(flow_id, session, {"has_filed_taxes": True})
    """

    def __init__(
        self,
        state_model: Type[S],
        key_prefix: str,
        settings: Optional[WizardSettings] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.state_model = state_model
        self.key_prefix = key_prefix
        self.settings = settings or get_wizard_settings()
        self._clock = clock or utc_now

    @property
    def timeout(self) -> timedelta:
        return timedelta(minutes=self.settings.session_timeout_minutes)

    def session_key(self, flow_id: Any) -> str:
        """Derive the session key for a flow id."""
        return f"{self.key_prefix}{parse_flow_id(flow_id)}"

    def _identify(self, flow_id: Any) -> tuple:
        try:
            uuid = parse_flow_id(flow_id)
        except InvalidIdentifier as e:
            logger.warning(f"Rejected flow id {flow_id!r} for {self.key_prefix}")
            e.session_key = f"{self.key_prefix}{flow_id}"
            raise
        flow_id_var.set(str(uuid))
        return uuid, f"{self.key_prefix}{uuid}"

    async def _write(self, session: HttpSession, key: str, state: S) -> None:
        await session.set(key, state.model_dump_json().encode("utf-8"))

    async def start(self, flow_id: Any, session: HttpSession, **initial_fields: Any) -> S:
        """
        Create a fresh state for flow_id and persist it.

        Any previous state under the same key is replaced.
        """
        uuid, key = self._identify(flow_id)
        fields = {
            **initial_fields,
            "id": uuid,
            "last_updated_on": self._clock(),
            "edit_mode": False,
        }
        state = self.state_model.model_validate(fields)
        await self._write(session, key, state)
        logger.info(f"Flow started: {key}")
        return state

    async def load(self, flow_id: Any, session: HttpSession) -> S:
        """
        Load the state for flow_id.

        Raises:
            InvalidIdentifier: flow_id is not a UUID
            SessionMissing: nothing (readable) is stored under the key
            SessionExpired: the state was idle for the whole timeout window
        """
        _, key = self._identify(flow_id)

        payload = await session.get(key)
        if payload is None:
            logger.warning(f"Flow state not found: {key}")
            raise SessionMissing(f"Flow state not found: {key}", session_key=key)

        try:
            state = self.state_model.model_validate_json(payload)
        except ValidationError as e:
            logger.warning(f"Discarding unreadable flow state {key}: {e.error_count()} errors")
            await session.delete(key)
            raise SessionMissing(f"Flow state unreadable: {key}", session_key=key)

        if self._clock() - state.last_updated_on >= self.timeout:
            await session.delete(key)
            logger.warning(f"Flow state expired: {key} (last updated {state.last_updated_on.isoformat()})")
            raise SessionExpired(f"Flow state expired: {key}", session_key=key)

        return state

    async def save(
        self,
        flow_id: Any,
        session: HttpSession,
        partial_state: Mapping[str, Any],
        fields_to_remove: Iterable[str] = (),
    ) -> S:
        """
        Merge partial_state into the stored state and persist it.

        Top-level keys of partial_state replace the stored values. Keys named
        in fields_to_remove are reset to their defaults after the merge.

        Returns:
            The new state snapshot
        """
        current = await self.load(flow_id, session)
        key = self.session_key(flow_id)

        if current.is_submitted:
            logger.warning(f"Rejected save on submitted flow: {key}")
            raise SubmittedStateImmutable(f"Flow already submitted: {key}")

        fields_to_remove = tuple(fields_to_remove)
        model_fields = self.state_model.model_fields
        for name in (*partial_state.keys(), *fields_to_remove):
            if name in _PROTECTED_FIELDS:
                raise ValueError(f"Field {name!r} is managed by the lifecycle and cannot be saved")
            if name not in model_fields:
                raise ValueError(f"Unknown field {name!r} for {self.state_model.__name__}")

        merged = {name: getattr(current, name) for name in model_fields}
        merged.update(partial_state)
        for name in fields_to_remove:
            merged.pop(name, None)
        merged["last_updated_on"] = self._clock()

        state = self.state_model.model_validate(merged)
        await self._write(session, key, state)
        logger.info(
            f"Flow saved: {key}",
            extra={'extra_data': {
                'fields': sorted(partial_state.keys()),
                'removed': sorted(fields_to_remove),
            }}
        )
        return state

    async def clear(self, flow_id: Any, session: HttpSession) -> None:
        """Remove the state for flow_id. Clearing an absent flow is a no-op."""
        _, key = self._identify(flow_id)
        await session.delete(key)
        logger.info(f"Flow cleared: {key}")
