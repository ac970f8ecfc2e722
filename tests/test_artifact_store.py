"""
Artifact store lifecycle and its consistency guarantees.
"""

import pytest

from core.artifact_store import ArtifactStore
from core.errors import ErrorCode, InternalInconsistencyError
from models import ArtifactStatus

from .fixtures import run_scanner


class TestLifecycle:
    def test_create_append_complete(self):
        store = ArtifactStore()
        artifact_id = store.create("py", "a-1")
        store.append(artifact_id, "print(")
        store.append(artifact_id, "1)")
        store.complete(artifact_id)

        [artifact] = store.list()
        assert artifact.content == "print(1)"
        assert artifact.status is ArtifactStatus.COMPLETE
        assert not artifact.forced
        assert store.current is None

    def test_generated_ids_are_unique(self):
        store = ArtifactStore()
        first = store.create("a")
        store.complete(first)
        second = store.create("b")
        assert first != second

    def test_insertion_order_is_discovery_order(self):
        store = ArtifactStore()
        for language in ("c", "a", "b"):
            store.complete(store.create(language))
        assert [a.language for a in store.list()] == ["c", "a", "b"]

    def test_list_returns_a_copy(self):
        store = ArtifactStore()
        store.create("py")
        store.list().clear()
        assert len(store) == 1

    def test_title(self):
        store = ArtifactStore()
        store.create("python", "x")
        assert store.get("x").title == "Python Code"


class TestConsistency:
    def test_append_to_non_current_artifact_is_rejected(self):
        store = ArtifactStore()
        store.create("py", "a-1")
        with pytest.raises(InternalInconsistencyError) as exc_info:
            store.append("a-2", "x")
        assert exc_info.value.code is ErrorCode.INTERNAL_INCONSISTENCY

    def test_append_after_complete_is_rejected(self):
        store = ArtifactStore()
        store.create("py", "a-1")
        store.complete("a-1")
        with pytest.raises(InternalInconsistencyError):
            store.append("a-1", "late")
        assert store.get("a-1").content == ""

    def test_complete_without_collecting_artifact_is_rejected(self):
        with pytest.raises(InternalInconsistencyError):
            ArtifactStore().complete("nope")

    def test_second_collecting_artifact_is_rejected(self):
        store = ArtifactStore()
        store.create("py", "a-1")
        with pytest.raises(InternalInconsistencyError):
            store.create("js", "a-2")

    def test_duplicate_id_is_rejected(self):
        store = ArtifactStore()
        store.complete(store.create("py", "a-1"))
        with pytest.raises(InternalInconsistencyError):
            store.create("py", "a-1")

    def test_clear_while_collecting_is_rejected(self):
        store = ArtifactStore()
        store.create("py", "a-1")
        with pytest.raises(InternalInconsistencyError):
            store.clear()
        assert len(store) == 1

    def test_clear_empties_the_collection(self):
        store = ArtifactStore()
        store.complete(store.create("py"))
        store.clear()
        assert store.list() == []
        assert store.current is None

    def test_scanner_never_triggers_an_inconsistency(self):
        text = "a[CODE_START:x]1[CODE_END]b[CODE_START:y]2[CODE_START:z]3[CODE_END]c[CODE_START:w]4"
        for size in range(1, len(text) + 1):
            chunks = [text[i:i + size] for i in range(0, len(text), size)]
            run_scanner(chunks)


class TestApply:
    def test_events_from_scanner(self):
        store = ArtifactStore()
        created = store.apply({'type': 'artifact_started', 'artifact_id': 's-1', 'language': 'py'})
        updated = store.apply({'type': 'artifact_appended', 'artifact_id': 's-1', 'text': 'x'})
        updated += store.apply({'type': 'artifact_appended', 'artifact_id': 's-1', 'text': 'y'})
        completed = store.apply({'type': 'artifact_completed', 'artifact_id': 's-1', 'forced': True})

        assert created == [{'type': 'artifact_created', 'artifact_id': 's-1', 'language': 'py', 'title': 'Py Code'}]
        assert [ev['content'] for ev in updated] == ['x', 'xy']
        assert completed == [{'type': 'artifact_completed', 'artifact_id': 's-1', 'forced': True}]
        assert store.get('s-1').forced

    def test_display_text_passes_through(self):
        ev = {'type': 'display_text', 'text': 'hi'}
        assert ArtifactStore().apply(ev) == [ev]


class TestAbsorb:
    def test_moves_settled_artifacts(self):
        turn_store, conversation = ArtifactStore(), ArtifactStore()
        turn_store.complete(turn_store.create("py", "t-1"))
        conversation.absorb(turn_store)
        assert [a.artifact_id for a in conversation.list()] == ["t-1"]

    def test_refuses_a_store_that_is_still_collecting(self):
        turn_store = ArtifactStore()
        turn_store.create("py", "t-1")
        with pytest.raises(InternalInconsistencyError):
            ArtifactStore().absorb(turn_store)
