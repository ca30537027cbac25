"""Trace ids carried across asyncio tasks so log records can be tied to spans."""

from __future__ import annotations

from contextvars import ContextVar, Token
from dataclasses import dataclass, replace
import secrets


@dataclass(frozen=True)
class TraceIds:
    trace_id: str
    span_id: str


# Tasks spawned by asyncio.gather copy the caller's context, so a batch shares its trace id
_current: ContextVar[TraceIds | None] = ContextVar("wikidot_amc_trace", default=None)


def new_trace() -> TraceIds:
    return TraceIds(trace_id=secrets.token_hex(16), span_id=secrets.token_hex(8))


def current_trace() -> TraceIds:
    """Return the active ids, starting a fresh trace when none is bound."""
    ids = _current.get()
    if ids is None:
        ids = new_trace()
        _current.set(ids)
    return ids


def bind_trace(trace_id: str, span_id: str) -> Token[TraceIds | None]:
    return _current.set(TraceIds(trace_id=trace_id, span_id=span_id))


def set_span_id(span_id: str) -> None:
    """Point log correlation at a new span within the current trace."""
    _current.set(replace(current_trace(), span_id=span_id))
