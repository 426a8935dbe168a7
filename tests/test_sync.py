"""
SyncController tests
====================
Snapshot / apply / persist / rollback contract, sync and async.
"""
import asyncio
import copy
from dataclasses import replace

import pytest

from core import mutations
from core.errors import PersistenceError
from core.sync import DEFAULT_FAILURE_MESSAGE, LogNotifier, Store, SyncController


def rename_appointment(kasus):
    def mutate(state):
        appt = replace(state.appointments[0], kasus=kasus)
        return mutations.replace_appointment(state, appt)
    return mutate


def failing_persist():
    raise PersistenceError("database is locked")


# ============================================================
# Synchronous run()
# ============================================================

class TestRun:
    def test_success_keeps_new_state(self, controller, store, notifier):
        ok = controller.run(rename_appointment("Karies"), lambda: None, success="Tersimpan")

        assert ok is True
        assert store.state.appointments[0].kasus == "Karies"
        assert notifier.successes == ["Tersimpan"]
        assert notifier.errors == []

    def test_success_without_message_is_silent(self, controller, notifier):
        assert controller.run(rename_appointment("Karies"), lambda: None) is True
        assert notifier.successes == []

    def test_failure_restores_snapshot_exactly(self, controller, store, notifier):
        before = copy.deepcopy(store.state)

        ok = controller.run(rename_appointment("Karies"), failing_persist)

        assert ok is False
        assert store.state == before
        assert notifier.errors == [DEFAULT_FAILURE_MESSAGE]
        assert notifier.successes == []

    def test_failure_uses_action_specific_message(self, controller, notifier):
        controller.run(rename_appointment("x"), failing_persist, failure="Gagal menghapus. Perubahan dibatalkan.")
        assert notifier.errors == ["Gagal menghapus. Perubahan dibatalkan."]

    def test_mutation_error_rolls_back_without_persisting(self, controller, store, notifier):
        before = copy.deepcopy(store.state)
        calls = []

        def bad_mutation(state):
            raise LookupError("slot missing")

        ok = controller.run(bad_mutation, lambda: calls.append(1))

        assert ok is False
        assert calls == []
        assert store.state == before
        assert len(notifier.errors) == 1

    def test_failure_is_logged(self, controller, caplog):
        with caplog.at_level("ERROR", logger="core.sync"):
            controller.run(rename_appointment("x"), failing_persist, label="appointment a1")
        assert "Persisting appointment a1 failed" in caplog.text

    def test_default_notifier_logs(self, store, caplog):
        ctrl = SyncController(store)
        assert isinstance(ctrl.notifier, LogNotifier)
        with caplog.at_level("WARNING", logger="core.sync"):
            ctrl.run(rename_appointment("x"), failing_persist)
        assert DEFAULT_FAILURE_MESSAGE in caplog.text


class TestStore:
    def test_snapshot_is_independent(self, store):
        snap = store.snapshot()
        snap.departments[0].patients.clear()
        assert len(store.state.departments[0].patients) == 3

    def test_apply_and_rollback(self, store):
        snap = store.snapshot()
        store.apply(lambda s: mutations.remove_department(s, "dept-flat"))
        assert [d.id for d in store.state.departments] == ["dept-sub"]
        store.rollback(snap)
        assert [d.id for d in store.state.departments] == ["dept-flat", "dept-sub"]


# ============================================================
# run_async()
# ============================================================

class TestRunAsync:
    def test_success(self, controller, store, notifier):
        async def persist():
            return None

        ok = asyncio.run(controller.run_async(rename_appointment("Gingivitis"), persist, success="OK"))

        assert ok is True
        assert store.state.appointments[0].kasus == "Gingivitis"
        assert notifier.successes == ["OK"]

    def test_failure_rolls_back(self, controller, store, notifier):
        before = copy.deepcopy(store.state)

        async def persist():
            raise PersistenceError("timeout")

        ok = asyncio.run(controller.run_async(rename_appointment("x"), persist))

        assert ok is False
        assert store.state == before
        assert notifier.errors == [DEFAULT_FAILURE_MESSAGE]

    def test_same_entity_race_loses_newer_change(self, controller, store, notifier):
        """An older failing write rolls back past a newer successful one."""
        original = copy.deepcopy(store.state)

        async def scenario():
            gate = asyncio.Event()

            async def slow_failure():
                await gate.wait()
                raise PersistenceError("late failure")

            async def fast_success():
                gate.set()

            return await asyncio.gather(
                controller.run_async(rename_appointment("first"), slow_failure),
                controller.run_async(rename_appointment("second"), fast_success),
            )

        results = asyncio.run(scenario())

        assert results == [False, True]
        assert store.state == original
        assert len(notifier.errors) == 1


@pytest.mark.parametrize("message", [None, "Appointment diperbarui"])
def test_store_state_property_is_replaced_not_mutated(message):
    store = Store()
    ctrl = SyncController(store)
    first = store.state
    ctrl.run(lambda s: replace(s, appointments=[]), lambda: None, success=message)
    assert store.state is not first
