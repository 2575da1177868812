"""
Persistence layer for wizard state.

This module provides:
- Session stores (in-memory and Redis) behind a key/value interface
- The per-HTTP-session view used by every flow
- The state lifecycle manager (start, load, save, clear)
"""

from .session_store import (
    HttpSession,
    InMemorySessionStore,
    RedisSessionStore,
    SessionStore,
    get_session_store,
    reset_session_store,
)
from .state_lifecycle import (
    APPLY_FLOW_KEY_PREFIX,
    PROTECTED_RENEW_FLOW_KEY_PREFIX,
    RENEW_FLOW_KEY_PREFIX,
    StateLifecycleManager,
    parse_flow_id,
)

__all__ = [
    # Stores
    "HttpSession",
    "InMemorySessionStore",
    "RedisSessionStore",
    "SessionStore",
    "get_session_store",
    "reset_session_store",
    # Lifecycle
    "APPLY_FLOW_KEY_PREFIX",
    "PROTECTED_RENEW_FLOW_KEY_PREFIX",
    "RENEW_FLOW_KEY_PREFIX",
    "StateLifecycleManager",
    "parse_flow_id",
]
