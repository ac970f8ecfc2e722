"""
Shared helpers for driving the scanner, dispatcher and orchestrator in tests.
"""

import asyncio

import httpx

from core.artifact_store import ArtifactStore
from core.config import Settings
from core.marker_scanner import ScanState, finish, scan
from core.orchestrator import Orchestrator
from core.transport import HttpTransport

BACKEND = 'http://backend.test'


def run_scanner(chunks, session_id='s'):
    """
    Feed `chunks` through the scanner and a store, the way a CODE turn does.

    Returns (display text, [(artifact_id, language, content)], scan events).
    The store raises InternalInconsistencyError if the scanner ever asks
    for an operation on something other than the collecting artifact.
    """
    store = ArtifactStore()
    state = ScanState(session_id=session_id)
    display, events = [], []

    def apply(evs):
        for ev in evs:
            events.append(ev)
            for ui_ev in store.apply(ev):
                if ui_ev['type'] == 'display_text':
                    display.append(ui_ev['text'])

    for chunk in chunks:
        state, evs = scan(state, chunk)
        apply(evs)
    state, evs = finish(state)
    apply(evs)

    assert store.current is None
    artifacts = [(a.artifact_id, a.language, a.content) for a in store.list()]
    return ''.join(display), artifacts, events


async def async_items(items):
    for item in items:
        yield item


def drain(queue: asyncio.Queue) -> list:
    events = []
    while not queue.empty():
        events.append(queue.get_nowait())
    return events


def make_orchestrator(handler, settings=None):
    """Orchestrator whose HTTP calls are answered by `handler`."""
    events_q = asyncio.Queue()
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    transport = HttpTransport(BACKEND, client=client)
    return Orchestrator(events_q, settings or Settings(), transport=transport), events_q
