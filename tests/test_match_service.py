import json
import threading
import unittest

from sideline.services import LineupError, MatchService, MemoryStore, PersistenceError
from sideline.utils import LABEL_SEPARATOR, PLACEHOLDER, ROSTER_SEED, STORAGE_KEYS

from tests.helpers import FailingStore, FakeClock


def _store(**docs) -> MemoryStore:
    """MemoryStore pre-filled by logical name, e.g. clock={...}."""
    return MemoryStore({STORAGE_KEYS[name]: json.dumps(value) for name, value in docs.items()})


class LoadTests(unittest.TestCase):

    def test_first_run_uses_defaults(self) -> None:
        service = MatchService(MemoryStore(), now=FakeClock()).load()
        state = service.match_state

        self.assertEqual([p.id for p in state.roster], [r["id"] for r in ROSTER_SEED])
        self.assertEqual(state.formation, "433")
        self.assertEqual(state.orientation, "right")
        self.assertFalse(state.clock.running)
        self.assertEqual(state.clock.elapsed_ms, 0)
        self.assertEqual(len(state.assignments), 0)

    def test_corrupt_documents_fall_back(self) -> None:
        store = MemoryStore({
            STORAGE_KEYS["roster"]: "{not json",
            STORAGE_KEYS["clock"]: json.dumps(["running"]),
            STORAGE_KEYS["assignments"]: json.dumps("GK"),
            STORAGE_KEYS["formation"]: json.dumps(433),
            STORAGE_KEYS["minutes"]: json.dumps({"p1": "lots"}),
        })
        service = MatchService(store, now=FakeClock()).load()
        state = service.match_state

        self.assertEqual(len(state.roster), len(ROSTER_SEED))
        self.assertFalse(state.clock.running)
        self.assertEqual(len(state.assignments), 0)
        self.assertEqual(state.formation, "433")
        self.assertEqual(state.ledger["p1"].total_ms, 0)
        self.assertTrue(service.invariant_violations().is_valid)

    def test_stale_and_absent_assignments_dropped(self) -> None:
        store = _store(
            attendance={"p1": True, "p2": False, "p3": True},
            formation="442",
            assignments={"GK": "p1", "ST": "p3", "RB": "p2", "LB": "p3"},
        )
        service = MatchService(store, now=FakeClock()).load()

        self.assertEqual(service.match_state.assignments.snapshot(), {"GK": "p1", "LB": "p3"})

    def test_duplicate_holder_keeps_one_position(self) -> None:
        store = _store(
            attendance={"p1": True},
            assignments={"GK": "p1", "RB": "p1"},
        )
        service = MatchService(store, now=FakeClock()).load()

        self.assertEqual(len(service.match_state.assignments), 1)
        self.assertTrue(service.invariant_violations().is_valid)

    def test_sessions_reconciled_with_stopped_clock(self) -> None:
        store = _store(
            attendance={"p1": True},
            assignments={"GK": "p1"},
            minutes={"p1": {"totalMs": 4000, "activeStartMs": 123}},
            clock={"running": False, "startedAt": None, "elapsedMs": 4000},
        )
        service = MatchService(store, now=FakeClock()).load()

        entry = service.match_state.ledger["p1"]
        self.assertEqual(entry.total_ms, 4000)
        self.assertIsNone(entry.active_start_ms)
        saved = json.loads(store.documents[STORAGE_KEYS["minutes"]])
        self.assertIsNone(saved["p1"]["activeStartMs"])

    def test_running_clock_without_start_is_stopped(self) -> None:
        store = _store(clock={"running": True, "startedAt": None, "elapsedMs": 900})
        service = MatchService(store, now=FakeClock()).load()

        self.assertFalse(service.match_state.clock.running)
        self.assertEqual(service.match_state.clock.elapsed_ms, 900)

    def test_running_clock_reopens_missing_session(self) -> None:
        time = FakeClock()
        store = _store(
            attendance={"p1": True},
            assignments={"GK": "p1"},
            clock={"running": True, "startedAt": time.t - 5000, "elapsedMs": 0},
        )
        service = MatchService(store, now=time).load()

        self.assertEqual(service.match_state.ledger["p1"].active_start_ms, time.t)
        self.assertTrue(service.invariant_violations().is_valid)


class WriteThroughTests(unittest.TestCase):

    def test_every_mutation_is_visible_to_a_fresh_load(self) -> None:
        time = FakeClock()
        store = MemoryStore()
        service = MatchService(store, now=time).load()
        service.set_attendance("p1", True)
        service.assign("CM", "p1")
        service.change_formation("442")  # CM is dropped
        service.set_attendance("p2", True)
        service.assign("RCM", "p2")
        service.set_orientation("up")
        service.start()
        time.advance(20_000)

        reloaded = MatchService(store, now=time).load()
        state = reloaded.match_state

        self.assertEqual(state.formation, "442")
        self.assertEqual(state.orientation, "up")
        self.assertEqual(state.assignments.snapshot(), {"RCM": "p2"})
        self.assertTrue(state.clock.running)
        self.assertEqual(reloaded.elapsed(), 20_000)
        self.assertEqual(reloaded.effective_time("p2"), 20_000)

    def test_all_keys_written(self) -> None:
        store = MemoryStore()
        service = MatchService(store, now=FakeClock()).load()
        service.set_attendance("p1", True)

        self.assertEqual(set(store.documents), set(STORAGE_KEYS.values()))
        clock = json.loads(store.documents[STORAGE_KEYS["clock"]])
        self.assertEqual(clock, {"running": False, "startedAt": None, "elapsedMs": 0})


class SnapshotTests(unittest.TestCase):

    def setUp(self) -> None:
        self.time = FakeClock()
        self.service = MatchService(MemoryStore(), now=self.time).load()

    def test_snapshot_reports_live_times(self) -> None:
        self.service.set_attendance("p5", True)
        self.service.assign("ST", "p5")
        self.service.start()
        self.time.advance(65_000)

        snap = self.service.snapshot()

        self.assertEqual(snap["clock"], {"running": True, "elapsed_ms": 65_000, "display": "01:05"})
        self.assertEqual(snap["present"], ["p5"])
        ethan = next(p for p in snap["players"] if p["id"] == "p5")
        self.assertEqual(ethan["position"], "ST")
        self.assertEqual(ethan["effective_ms"], 65_000)
        st = next(e for e in snap["lineup"] if e["position"] == "ST")
        self.assertEqual(st["label"], f"9 Ethan {LABEL_SEPARATOR} 01:05")
        self.assertNotIn(PLACEHOLDER, st["label"])
        # 433 ST is (50, 24) attacking up; default orientation is right
        self.assertEqual((st["x"], st["y"]), (24, 50))

    def test_snapshot_is_read_only(self) -> None:
        before = dict(self.service.gateway.documents)
        self.service.snapshot()
        self.assertEqual(self.service.match_state.ledger, {})
        self.assertEqual(self.service.gateway.documents, before)

    def test_unknown_holder_renders_placeholder(self) -> None:
        store = _store(
            roster=[{"id": "p1", "name": "Alex", "number": 2}],
            attendance={"p1": True, "gone": True},
            assignments={"GK": "gone"},
        )
        service = MatchService(store, now=self.time).load()

        gk = service.snapshot()["lineup"][0]
        self.assertEqual(gk["player_id"], "gone")
        self.assertEqual(gk["label"], PLACEHOLDER)
        self.assertIsNone(gk["effective_ms"])


class FailedSaveTests(unittest.TestCase):
    """A write that fails leaves memory and storage as they were."""

    def setUp(self) -> None:
        self.time = FakeClock()
        self.store = FailingStore([STORAGE_KEYS["clock"]])
        self.service = MatchService(self.store, now=self.time).load()
        self.service.set_attendance("p1", True)
        self.service.assign("GK", "p1")
        self.saved = dict(self.store.documents)

    def test_start_is_rolled_back(self) -> None:
        self.store.broken = True

        with self.assertRaises(PersistenceError):
            self.service.start()

        state = self.service.match_state
        self.assertFalse(state.clock.running)
        self.assertFalse(state.ledger["p1"].is_open)
        self.assertTrue(self.service.invariant_violations().is_valid)
        # minutes was written before clock failed; it must be put back
        self.assertEqual(self.store.documents, self.saved)

    def test_storage_reloads_consistently(self) -> None:
        self.store.broken = True
        with self.assertRaises(PersistenceError):
            self.service.start()
        self.store.broken = False

        reloaded = MatchService(self.store, now=self.time).load()
        self.assertFalse(reloaded.match_state.clock.running)
        self.assertEqual(reloaded.match_state.assignments.snapshot(), {"GK": "p1"})
        self.assertTrue(reloaded.invariant_violations().is_valid)

    def test_service_recovers_once_storage_does(self) -> None:
        self.store.broken = True
        with self.assertRaises(PersistenceError):
            self.service.start()
        self.store.broken = False

        self.service.start()
        self.time.advance(10_000)

        self.assertEqual(self.service.effective_time("p1"), 10_000)
        self.assertTrue(json.loads(self.store.documents[STORAGE_KEYS["clock"]])["running"])

    def test_refused_operation_writes_nothing(self) -> None:
        self.store.broken = True
        with self.assertRaises(LineupError):
            self.service.assign("GK", "p2")
        self.assertEqual(self.store.documents, self.saved)


class ConcurrentAccessTests(unittest.TestCase):

    def test_threads_sharing_one_service(self) -> None:
        service = MatchService(MemoryStore()).load()
        for player in ROSTER_SEED:
            service.set_attendance(player["id"], True)
        service.start()
        errors = []

        def lineup_worker(seed: int) -> None:
            ids = [p["id"] for p in ROSTER_SEED]
            try:
                for i in range(200):
                    player_id = ids[(seed + i) % len(ids)]
                    positions = service.snapshot()["lineup"]
                    position = positions[(seed * 3 + i) % len(positions)]["position"]
                    try:
                        service.assign(position, player_id)
                    except LineupError:
                        pass
                    if i % 3 == 0:
                        service.unassign(player_id)
            except Exception as e:
                errors.append(e)

        def formation_worker() -> None:
            try:
                for i in range(100):
                    service.change_formation(["433", "442", "352"][i % 3])
                    service.snapshot()
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=lineup_worker, args=(n,)) for n in range(4)]
        threads.append(threading.Thread(target=formation_worker))
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        self.assertEqual(errors, [])
        result = service.invariant_violations()
        self.assertTrue(result.is_valid, result.errors)
        for player_id in service.match_state.assignments.player_ids():
            self.assertTrue(service.match_state.ledger[player_id].is_open)


if __name__ == "__main__":
    unittest.main()
