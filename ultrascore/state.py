import copy
import threading
from datetime import datetime, timezone

from .protocol import TEAMS, TEAM_A, TEAM_B, TeamGeneral, period_labels


def _utcnow():
    return datetime.now(timezone.utc)


def default_general():
    title, title_short, round_title = period_labels(0)
    return {
        "period": 0,
        "periodTitle": title,
        "round": round_title,
        "periodTitleShort": title_short,
        "matchTimerStatus": 0,
        "matchTimer": "00:00.0",
        "shotClock": "0.0",
        "timeout": 0,
        TEAM_A: TeamGeneral().to_dict(),
        TEAM_B: TeamGeneral().to_dict(),
    }


def _team_lists():
    return {TEAM_A: [], TEAM_B: []}


def _check_team(team):
    if team not in TEAMS:
        raise ValueError(f"unknown team {team!r}, expected one of {TEAMS}")


class MatchStore:
    """Latest-known match state, merged from independently arriving frames.

    One lock covers every merge and every read, so a reader always sees a
    frame either fully applied or not at all.
    """

    def __init__(self, clock=_utcnow):
        self._clock = clock
        self._lock = threading.Lock()
        self._state = None
        self.reset()

    def reset(self):
        with self._lock:
            self._state = {
                "general": default_general(),
                "players": _team_lists(),
                "court": _team_lists(),
                "penalties": _team_lists(),
                "lastUpdated": None,
            }

    def _touch(self):
        # Must be called under self._lock
        self._state["lastUpdated"] = self._clock()

    def merge_general(self, fields):
        """Shallow-merge only the given keys into the general section."""
        fields = copy.deepcopy(dict(fields))
        if "period" in fields:
            # Labels always follow period
            title, title_short, round_title = period_labels(fields["period"])
            fields["periodTitle"] = title
            fields["periodTitleShort"] = title_short
            fields["round"] = round_title
        with self._lock:
            self._state["general"].update(fields)
            self._touch()

    def _replace(self, section, team, values):
        _check_team(team)
        values = copy.deepcopy(list(values))
        with self._lock:
            self._state[section][team] = values
            self._touch()

    def merge_roster(self, team, entries):
        self._replace("players", team, entries)

    def merge_court(self, team, numbers):
        self._replace("court", team, numbers)

    def merge_penalties(self, team, entries):
        self._replace("penalties", team, entries)

    @property
    def last_updated(self):
        with self._lock:
            return self._state["lastUpdated"]

    def snapshot(self):
        """Thread-safe: deep copy of the full state, ``lastUpdated`` as ISO text."""
        with self._lock:
            state = copy.deepcopy(self._state)
        updated = state["lastUpdated"]
        state["lastUpdated"] = updated.isoformat() if updated else None
        return state
