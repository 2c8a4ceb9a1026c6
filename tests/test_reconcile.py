import json
import os
import tempfile
import threading
import unittest
from pathlib import Path
from typing import List, Optional, Union

from automusic import (
    ActiveState,
    BlockType,
    Color,
    ConfigConsistencyError,
    ConfigEntry,
    ConfigStore,
    PlaybackError,
    Reconciler,
    ResolvedTarget,
    TransientError,
)

CATALOG = [
    BlockType(1, "Break", Color(0, 255, 0)),
    BlockType(2, "Coding", Color(255, 0, 0)),
]


class FakeClient:
    def __init__(self, results: List[Union[ActiveState, Exception]]) -> None:
        self.results = list(results)
        self.calls = 0

    def fetch_active_state(self) -> ActiveState:
        self.calls += 1
        result = self.results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


class FakeSupervisor:
    def __init__(self) -> None:
        self.applied: List[Optional[ResolvedTarget]] = []
        self.current_target: Optional[ResolvedTarget] = None
        self.fail_next = False
        self.exited = False

    def is_running(self) -> bool:
        return self.current_target is not None and not self.exited

    def apply(self, target: Optional[ResolvedTarget]) -> bool:
        self.applied.append(target)
        if self.fail_next:
            self.fail_next = False
            self.current_target = None
            raise PlaybackError("mpv refused to start")
        changed = target != self.current_target or self.exited
        self.current_target = target
        self.exited = False
        return changed


def write_entries(path: Path, entries: List[ConfigEntry], mtime_offset_sec: int = 0) -> None:
    path.write_text(json.dumps([e.to_json() for e in entries]), encoding="utf-8")
    if mtime_offset_sec:
        stat = os.stat(path)
        shifted = stat.st_mtime_ns + mtime_offset_sec * 1_000_000_000
        os.utime(path, ns=(shifted, shifted))


class ReconcilerTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmpdir.cleanup)
        self.path = Path(self._tmpdir.name) / "config.json"
        write_entries(
            self.path,
            [
                ConfigEntry("Coding", "Focus", "focus.mp3", False),
                ConfigEntry("Coding", None, "coding-list", True),
            ],
        )
        self.store = ConfigStore(str(self.path))
        self.supervisor = FakeSupervisor()

    def make_reconciler(self, results: List[Union[ActiveState, Exception]]) -> Reconciler:
        self.client = FakeClient(results)
        return Reconciler(self.store, self.client, self.supervisor, CATALOG, poll_interval_sec=0)

    def test_state_change_applies_resolved_target(self) -> None:
        reconciler = self.make_reconciler([ActiveState(2, "Focus"), ActiveState(2, "Other")])

        self.assertTrue(reconciler.run_cycle())
        self.assertTrue(reconciler.run_cycle())

        self.assertEqual(
            self.supervisor.applied,
            [ResolvedTarget("focus.mp3", False), ResolvedTarget("coding-list", True)],
        )
        self.assertEqual(reconciler.state, ActiveState(2, "Other"))

    def test_unchanged_state_does_not_apply(self) -> None:
        reconciler = self.make_reconciler([ActiveState(2, "Focus"), ActiveState(2, "Focus")])

        reconciler.run_cycle()
        self.assertFalse(reconciler.run_cycle())

        self.assertEqual(len(self.supervisor.applied), 1)

    def test_unmapped_block_stops_playback(self) -> None:
        reconciler = self.make_reconciler([ActiveState(2, "Focus"), ActiveState(1, "Lunch")])

        reconciler.run_cycle()
        reconciler.run_cycle()

        self.assertEqual(self.supervisor.applied[-1], None)
        self.assertEqual(reconciler.state, ActiveState(1, "Lunch"))

    def test_transient_failure_leaves_state_untouched(self) -> None:
        reconciler = self.make_reconciler(
            [ActiveState(2, "Focus"), TransientError("timed out"), ActiveState(2, "Focus")]
        )
        reconciler.run_cycle()
        state_before = reconciler.state
        target_before = self.supervisor.current_target

        self.assertFalse(reconciler.run_cycle())

        self.assertEqual(reconciler.state, state_before)
        self.assertEqual(self.supervisor.current_target, target_before)
        self.assertEqual(len(self.supervisor.applied), 1)

        self.assertFalse(reconciler.run_cycle())
        self.assertEqual(len(self.supervisor.applied), 1)

    def test_hot_reload_picks_up_new_entries(self) -> None:
        reconciler = self.make_reconciler([ActiveState(2, "Focus"), ActiveState(2, "Deep")])
        reconciler.run_cycle()

        write_entries(
            self.path,
            [
                ConfigEntry("Coding", "Focus", "focus.mp3", False),
                ConfigEntry("Coding", "Deep", "deep.mp3", False),
            ],
            mtime_offset_sec=5,
        )
        reconciler.run_cycle()

        self.assertEqual(self.supervisor.applied[-1], ResolvedTarget("deep.mp3", False))
        self.assertEqual(len(reconciler.lookup[2]), 2)

    def test_reload_alone_does_not_transition(self) -> None:
        reconciler = self.make_reconciler([ActiveState(2, "Focus"), ActiveState(2, "Focus")])
        reconciler.run_cycle()

        write_entries(self.path, [ConfigEntry("Coding", "Focus", "other.mp3", False)], mtime_offset_sec=5)
        reconciler.run_cycle()

        self.assertEqual(self.supervisor.applied, [ResolvedTarget("focus.mp3", False)])
        self.assertEqual(reconciler.lookup[2][0].music_url, "other.mp3")

    def test_reload_with_unknown_type_keeps_previous_table(self) -> None:
        reconciler = self.make_reconciler([ActiveState(2, "Focus")])
        previous = reconciler.lookup

        write_entries(self.path, [ConfigEntry("Gaming", None, "g.mp3", False)], mtime_offset_sec=5)
        with self.assertLogs(level="ERROR"):
            self.assertFalse(reconciler.reload_if_changed())

        self.assertIs(reconciler.lookup, previous)
        self.assertFalse(reconciler.reload_if_changed())

    def test_reload_happens_even_when_poll_fails(self) -> None:
        reconciler = self.make_reconciler([TransientError("refused")])
        write_entries(self.path, [ConfigEntry("Break", None, "b.mp3", False)], mtime_offset_sec=5)

        reconciler.run_cycle()

        self.assertIn(1, reconciler.lookup)
        self.assertEqual(self.supervisor.applied, [])

    def test_playback_failure_resets_state_for_retry(self) -> None:
        reconciler = self.make_reconciler([ActiveState(2, "Focus"), ActiveState(2, "Focus")])
        self.supervisor.fail_next = True

        with self.assertLogs(level="ERROR"):
            self.assertTrue(reconciler.run_cycle())
        self.assertEqual(reconciler.state, ActiveState.none())

        self.assertTrue(reconciler.run_cycle())
        self.assertEqual(self.supervisor.current_target, ResolvedTarget("focus.mp3", False))

    def test_exited_player_is_restarted_for_same_block(self) -> None:
        reconciler = self.make_reconciler(
            [ActiveState(2, "Focus"), ActiveState(2, "Focus"), ActiveState(2, "Focus")]
        )
        reconciler.run_cycle()
        self.supervisor.exited = True

        with self.assertLogs(level="WARNING"):
            self.assertTrue(reconciler.run_cycle())

        self.assertEqual(
            self.supervisor.applied,
            [ResolvedTarget("focus.mp3", False), ResolvedTarget("focus.mp3", False)],
        )
        self.assertTrue(self.supervisor.is_running())
        self.assertFalse(reconciler.run_cycle())
        self.assertEqual(len(self.supervisor.applied), 2)

    def test_unmapped_block_is_not_restarted(self) -> None:
        reconciler = self.make_reconciler([ActiveState(1, "Lunch"), ActiveState(1, "Lunch")])
        reconciler.run_cycle()

        self.assertFalse(reconciler.run_cycle())
        self.assertEqual(self.supervisor.applied, [None])

    def test_unknown_type_at_startup_is_fatal(self) -> None:
        write_entries(self.path, [ConfigEntry("Gaming", None, "g.mp3", False)])
        with self.assertRaises(ConfigConsistencyError):
            self.make_reconciler([])

    def test_run_stops_when_event_is_set(self) -> None:
        stop_event = threading.Event()

        class StoppingClient(FakeClient):
            def fetch_active_state(self) -> ActiveState:
                if self.calls >= 2:
                    stop_event.set()
                return super().fetch_active_state()

        client = StoppingClient([ActiveState(2, "Focus"), TransientError("x"), ActiveState(1, "")])
        reconciler = Reconciler(
            self.store, client, self.supervisor, CATALOG, poll_interval_sec=0, stop_event=stop_event
        )

        reconciler.run()

        self.assertEqual(client.calls, 3)
        self.assertEqual(self.supervisor.applied[-1], None)


if __name__ == "__main__":
    unittest.main()
