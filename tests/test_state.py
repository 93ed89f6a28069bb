import threading
from datetime import datetime, timedelta, timezone

import pytest

from ultrascore.state import MatchStore


class _FakeClock:
    def __init__(self):
        self.now = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self):
        self.now = self.now + timedelta(seconds=1)
        return self.now


class TestDefaults:
    def test_initial_snapshot(self, store):
        state = store.snapshot()
        assert state["general"]["period"] == 0
        assert state["general"]["periodTitle"] == "pregame"
        assert state["general"]["matchTimer"] == "00:00.0"
        assert state["general"]["shotClock"] == "0.0"
        assert state["general"]["teamA"] == {
            "score": 0, "foul": 0, "timeout": 0, "possession": False,
        }
        assert state["players"] == {"teamA": [], "teamB": []}
        assert state["court"] == {"teamA": [], "teamB": []}
        assert state["penalties"] == {"teamA": [], "teamB": []}
        assert state["lastUpdated"] is None


class TestMergeGeneral:
    def test_partial_merge_keeps_other_fields(self, store):
        store.merge_general({"matchTimer": "09:57", "shotClock": "21"})
        store.merge_general({"period": 3})
        general = store.snapshot()["general"]
        assert general["period"] == 3
        assert general["matchTimer"] == "09:57"
        assert general["shotClock"] == "21"
        assert general["timeout"] == 0

    def test_labels_follow_period_only_merge(self, store):
        store.merge_general({"period": 3})
        general = store.snapshot()["general"]
        assert general["periodTitle"] == "quarter2"
        assert general["periodTitleShort"] == "Q2"
        assert general["round"] == "2nd Quarter"

    def test_out_of_range_period_clears_labels(self, store):
        store.merge_general({"period": 99})
        general = store.snapshot()["general"]
        assert general["period"] == 99
        assert (general["periodTitle"], general["periodTitleShort"], general["round"]) == ("", "", "")

    def test_merge_without_period_keeps_labels(self, store):
        store.merge_general({"period": 9})
        store.merge_general({"shotClock": "4.3"})
        assert store.snapshot()["general"]["periodTitle"] == "overtime1"

    def test_updates_last_updated(self, store):
        store.merge_general({"period": 1})
        assert store.snapshot()["lastUpdated"] is not None

    def test_other_sections_untouched(self, store):
        store.merge_roster("teamA", [{"number": "7", "score": 2, "foul": 0}])
        store.merge_general({"period": 5})
        assert store.snapshot()["players"]["teamA"] == [
            {"number": "7", "score": 2, "foul": 0}
        ]


class TestWholesaleReplacement:
    def test_roster_replaced(self, store):
        store.merge_roster("teamA", [{"number": "7", "score": 2, "foul": 0}])
        store.merge_roster("teamA", [{"number": "9", "score": 0, "foul": 1}])
        assert store.snapshot()["players"]["teamA"] == [
            {"number": "9", "score": 0, "foul": 1}
        ]

    def test_empty_merge_clears(self, store):
        store.merge_court("teamB", ["4", "5"])
        store.merge_court("teamB", [])
        assert store.snapshot()["court"]["teamB"] == []

    def test_penalties_per_team(self, store):
        store.merge_penalties("teamA", [{"number": "3", "time": "1:00"}])
        store.merge_penalties("teamB", [{"number": "8", "time": "0:30"}])
        store.merge_penalties("teamA", [])
        penalties = store.snapshot()["penalties"]
        assert penalties["teamA"] == []
        assert penalties["teamB"] == [{"number": "8", "time": "0:30"}]

    def test_unknown_team_raises(self, store):
        with pytest.raises(ValueError):
            store.merge_roster("home", [])


class TestLastUpdated:
    def test_advances_on_every_merge(self):
        clock = _FakeClock()
        store = MatchStore(clock=clock)
        store.merge_general({"period": 1})
        first = store.last_updated
        store.merge_general({"period": 1})
        second = store.last_updated
        store.merge_court("teamA", [])
        third = store.last_updated
        assert first < second < third

    def test_snapshot_is_iso_text(self):
        store = MatchStore(clock=_FakeClock())
        store.merge_general({})
        assert store.snapshot()["lastUpdated"] == "2024-01-01T00:00:01+00:00"


class TestSnapshotIsolation:
    def test_snapshot_is_a_copy(self, store):
        store.merge_roster("teamA", [{"number": "7", "score": 2, "foul": 0}])
        state = store.snapshot()
        state["players"]["teamA"][0]["score"] = 99
        state["general"]["teamA"]["score"] = 99
        fresh = store.snapshot()
        assert fresh["players"]["teamA"][0]["score"] == 2
        assert fresh["general"]["teamA"]["score"] == 0

    def test_caller_list_not_aliased(self, store):
        numbers = ["4"]
        store.merge_court("teamA", numbers)
        numbers.append("5")
        assert store.snapshot()["court"]["teamA"] == ["4"]

    def test_reset(self, store):
        store.merge_general({"period": 7})
        store.merge_court("teamA", ["4"])
        store.reset()
        state = store.snapshot()
        assert state["general"]["period"] == 0
        assert state["court"]["teamA"] == []
        assert state["lastUpdated"] is None


class TestConcurrentReaders:
    def test_general_merge_never_torn(self, store):
        stop = threading.Event()
        torn = []

        def writer():
            for i in range(2000):
                store.merge_general({"period": i % 16, "timeout": i % 16})
            stop.set()

        def reader():
            while not stop.is_set():
                general = store.snapshot()["general"]
                if general["period"] != general["timeout"]:
                    torn.append(general)

        threads = [threading.Thread(target=writer), threading.Thread(target=reader)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        assert torn == []
