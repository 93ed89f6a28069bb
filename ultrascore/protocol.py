from dataclasses import dataclass, field
from typing import Optional

# Ultra Score Data Out protocol constants
MARKER = (0xFF, 0xFE)
HEADER_LEN = 7  # marker(2) + category(2) + system id(1) + length(2)
MIN_FRAME_LEN = 5
NO_VALUE = 0xFF

CAT_GENERAL = (0x01, 0x01)
CAT_ROSTER_A = (0x02, 0x01)
CAT_ROSTER_B = (0x03, 0x01)
CAT_PENALTY_A = (0x04, 0x01)
CAT_PENALTY_B = (0x05, 0x01)
CAT_COURT_A = (0x06, 0x01)
CAT_COURT_B = (0x07, 0x01)

GENERAL_LEN = 18
ROSTER_SLOT = 5
COURT_SLOT = 4
PENALTY_SLOT = 5
MAX_PLAYERS = 20

TEAM_A = "teamA"
TEAM_B = "teamB"
TEAMS = (TEAM_A, TEAM_B)

# Skip reasons
TOO_SHORT = "too_short"
BAD_MARKER = "bad_marker"
UNKNOWN_CATEGORY = "unknown_category"
TRUNCATED_PAYLOAD = "truncated_payload"


# --- Period labels ---

PERIOD_TITLES = (
    "pregame",
    "quarter1",
    "break",
    "quarter2",
    "halftime",
    "quarter3",
    "break",
    "quarter4",
    "break",
    "overtime1",
    "break",
    "overtime2",
    "break",
    "overtime3",
    "break",
    "overtime4",
)

PERIOD_TITLES_SHORT = (
    "", "Q1", "", "Q2", "", "Q3", "", "Q4",
    "", "OT1", "", "OT2", "", "OT3", "", "OT4",
)

ROUND_TITLES = (
    "Pre Game",
    "1st Quarter",
    "Break",
    "2nd Quarter",
    "Halftime",
    "3rd Quarter",
    "Break",
    "4th Quarter",
    "Break",
    "Overtime 1",
    "Break",
    "Overtime 2",
    "Break",
    "Overtime 3",
    "Break",
    "Overtime 4",
)


def _lookup(table, period):
    if isinstance(period, int) and 0 <= period < len(table):
        return table[period]
    return ""


def period_labels(period):
    """Return (full title, short title, round title) for a period byte."""
    return (
        _lookup(PERIOD_TITLES, period),
        _lookup(PERIOD_TITLES_SHORT, period),
        _lookup(ROUND_TITLES, period),
    )


# --- Result types ---


@dataclass(frozen=True)
class Skip:
    reason: str

    def __bool__(self):
        return False


@dataclass(frozen=True)
class Applied:
    category: str
    team: Optional[str] = None


@dataclass(frozen=True)
class FrameHeader:
    category: tuple
    system_id: int
    declared_length: int
    payload: bytes
    payload_offset: int = HEADER_LEN
    team_selector: Optional[str] = None


@dataclass(frozen=True)
class TeamGeneral:
    score: int = 0
    foul: int = 0
    timeout: int = 0
    possession: bool = False

    def to_dict(self):
        return {
            "score": self.score,
            "foul": self.foul,
            "timeout": self.timeout,
            "possession": self.possession,
        }


@dataclass(frozen=True)
class GeneralState:
    period: int
    match_timer_status: int
    match_timer: str
    shot_clock: str
    timeout: int
    team_a: TeamGeneral = field(default_factory=TeamGeneral)
    team_b: TeamGeneral = field(default_factory=TeamGeneral)

    def to_dict(self):
        title, title_short, round_title = period_labels(self.period)
        return {
            "period": self.period,
            "periodTitle": title,
            "round": round_title,
            "periodTitleShort": title_short,
            "matchTimerStatus": self.match_timer_status,
            "matchTimer": self.match_timer,
            "shotClock": self.shot_clock,
            "timeout": self.timeout,
            TEAM_A: self.team_a.to_dict(),
            TEAM_B: self.team_b.to_dict(),
        }


@dataclass(frozen=True)
class RosterEntry:
    number: str
    score: int
    foul: int

    def to_dict(self):
        return {"number": self.number, "score": self.score, "foul": self.foul}


@dataclass(frozen=True)
class PenaltyEntry:
    number: str
    time: str

    def to_dict(self):
        return {"number": self.number, "time": self.time}


# --- Time formatting ---


def format_timer(minute, second, tenth):
    """Render the match timer the way the controller's own display does.

    Above one minute the tenths are dropped and any non-zero tenth rounds the
    seconds up, carrying once into the minutes. Under a minute the raw
    seconds and tenth are shown as ``S.T``.
    """
    if minute == NO_VALUE and second == NO_VALUE and tenth == NO_VALUE:
        return ""
    if minute > 0:
        if tenth >= 1:
            second += 1
            if second >= 60:
                second = 0
                minute += 1
        return f"{minute:02d}:{second:02d}"
    return f"{second}.{tenth}"


def format_shot_clock(second, tenth):
    """Whole seconds (rounded up) above 5 s, ``S.T`` at or below."""
    if second == NO_VALUE and tenth == NO_VALUE:
        return ""
    if second > 5:
        return str(second + 1 if tenth >= 1 else second)
    return f"{second}.{tenth}"


def format_penalty_time(minute, second):
    return f"{minute}:{second:02d}"


# --- Frame header ---


def read_frame_header(data):
    """Validate marker and header of one datagram.

    Returns a FrameHeader, or Skip when the bytes cannot be a frame. A
    declared length that runs past the buffer is clipped; the decoders
    decide whether what is left is enough. ``team_selector`` is the team
    the category addresses, None for general state and unknown categories.
    """
    if len(data) < MIN_FRAME_LEN:
        return Skip(TOO_SHORT)
    if data[0] != MARKER[0] or data[1] != MARKER[1]:
        return Skip(BAD_MARKER)
    if len(data) < HEADER_LEN:
        return Skip(TRUNCATED_PAYLOAD)

    category = (data[2], data[3])
    system_id = data[4]
    declared = int.from_bytes(data[5:7], "little")
    payload = bytes(data[HEADER_LEN : HEADER_LEN + declared])

    return FrameHeader(
        category=category,
        system_id=system_id,
        declared_length=declared,
        payload=payload,
        team_selector=_team_for(category),
    )


def _team_for(category):
    route = CATEGORY_ROUTES.get(category)
    return route[1] if route else None


# --- Sub-message decoders ---


def decode_jersey_number(raw):
    """ASCII jersey number from a 3-byte field; zero bytes mean absent."""
    number = "".join(chr(b) for b in raw[:3] if b)
    return number.replace("\0", "").strip()


def decode_general(payload):
    if len(payload) < GENERAL_LEN:
        return Skip(TRUNCATED_PAYLOAD)

    # 8 and 9 are reserved
    return GeneralState(
        period=payload[0],
        match_timer_status=payload[1],
        match_timer=format_timer(payload[2], payload[3], payload[4]),
        shot_clock=format_shot_clock(payload[5], payload[6]),
        timeout=payload[7],
        team_a=TeamGeneral(
            score=payload[10],
            foul=payload[12],
            timeout=payload[14],
            possession=payload[16] == 0x01,
        ),
        team_b=TeamGeneral(
            score=payload[11],
            foul=payload[13],
            timeout=payload[15],
            possession=payload[17] == 0x01,
        ),
    )


def decode_roster(payload):
    players = []
    for i in range(min(MAX_PLAYERS, len(payload) // ROSTER_SLOT)):
        offset = i * ROSTER_SLOT
        number = decode_jersey_number(payload[offset : offset + 3])
        if not number:
            continue
        players.append(
            RosterEntry(
                number=number,
                score=payload[offset + 3],
                foul=payload[offset + 4],
            )
        )
    return players


def decode_court(payload):
    on_court = []
    for i in range(min(MAX_PLAYERS, len(payload) // COURT_SLOT)):
        offset = i * COURT_SLOT
        number = decode_jersey_number(payload[offset : offset + 3])
        if number and payload[offset + 3] == 0x01:
            on_court.append(number)
    return on_court


def decode_penalties(payload):
    """Decode as many whole 5-byte penalty slots as the payload holds.

    The controller documentation declares a 12-byte penalty payload, which
    is not a multiple of the slot size. Trailing bytes are ignored rather
    than failing the frame.
    """
    penalties = []
    for offset in range(0, len(payload) - PENALTY_SLOT + 1, PENALTY_SLOT):
        number = decode_jersey_number(payload[offset : offset + 3])
        if not number:
            continue
        penalties.append(
            PenaltyEntry(
                number=number,
                time=format_penalty_time(payload[offset + 3], payload[offset + 4]),
            )
        )
    return penalties


# --- Dispatch ---

GENERAL = "general"
PLAYERS = "players"
COURT = "court"
PENALTIES = "penalties"

CATEGORY_ROUTES = {
    CAT_GENERAL: (GENERAL, None, decode_general),
    CAT_ROSTER_A: (PLAYERS, TEAM_A, decode_roster),
    CAT_ROSTER_B: (PLAYERS, TEAM_B, decode_roster),
    CAT_PENALTY_A: (PENALTIES, TEAM_A, decode_penalties),
    CAT_PENALTY_B: (PENALTIES, TEAM_B, decode_penalties),
    CAT_COURT_A: (COURT, TEAM_A, decode_court),
    CAT_COURT_B: (COURT, TEAM_B, decode_court),
}


def decode_frame(data):
    """Identify and decode one datagram.

    Returns (section, team, record) or a Skip. ``team`` is None for the
    general section.
    """
    header = read_frame_header(data)
    if isinstance(header, Skip):
        return header

    route = CATEGORY_ROUTES.get(header.category)
    if route is None:
        return Skip(UNKNOWN_CATEGORY)

    section, team, decoder = route
    record = decoder(header.payload)
    if isinstance(record, Skip):
        return record
    return section, team, record


# --- Encoding (simulator and tests) ---


def build_frame(category, payload, system_id=0x01, declared_length=None):
    payload = bytes(payload)
    if declared_length is None:
        declared_length = len(payload)
    return (
        bytes(MARKER)
        + bytes(category)
        + bytes([system_id])
        + declared_length.to_bytes(2, "little")
        + payload
    )


def encode_jersey_number(number):
    raw = str(number).encode("ascii")[:3]
    return raw + b"\x00" * (3 - len(raw))


def encode_roster(entries):
    """entries: iterable of (number, score, foul). Padded to 20 slots."""
    payload = bytearray(MAX_PLAYERS * ROSTER_SLOT)
    for i, (number, score, foul) in enumerate(list(entries)[:MAX_PLAYERS]):
        offset = i * ROSTER_SLOT
        payload[offset : offset + 3] = encode_jersey_number(number)
        payload[offset + 3] = score
        payload[offset + 4] = foul
    return bytes(payload)


def encode_court(entries):
    """entries: iterable of (number, on_court). Padded to 20 slots."""
    payload = bytearray(MAX_PLAYERS * COURT_SLOT)
    for i, (number, on_court) in enumerate(list(entries)[:MAX_PLAYERS]):
        offset = i * COURT_SLOT
        payload[offset : offset + 3] = encode_jersey_number(number)
        payload[offset + 3] = 0x01 if on_court else 0x00
    return bytes(payload)


def encode_penalties(entries):
    """entries: iterable of (number, minute, second)."""
    payload = bytearray()
    for number, minute, second in entries:
        payload += encode_jersey_number(number) + bytes([minute, second])
    return bytes(payload)
