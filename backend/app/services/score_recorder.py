"""
Set score recorder for lineup courts.

Holds per-court, per-set game counts in an immutable ScoreSheet and derives
set winners and court outcomes.

Formats:
  CUP        → one "set" per court holding total games; higher total wins the court
  USTA/FLEX  → up to 3 tennis sets; the court goes to whoever won more sets

Tennis set rule (USTA/FLEX): a side wins a set with at least 6 games and a
two-game lead, or 7-6. Anything else (5-4, 6-6) is an unfinished set and
has no winner.

Input is forgiving: blank or non-numeric game counts count as "not entered",
never as an error. A set is recorded only when both counts are entered.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional

LEAGUE_CUP = "CUP"
LEAGUE_USTA = "USTA"
LEAGUE_FLEX = "FLEX"
LEAGUE_FORMATS = (LEAGUE_CUP, LEAGUE_USTA, LEAGUE_FLEX)

# Input maximums per format (CUP counts total games across the court)
MAX_SET_GAMES = 7
MAX_CUP_GAMES = 20
MAX_SETS = 3


class Side(str, Enum):
    HOME = "home"
    AWAY = "away"


class ScoreInputError(Exception):
    """Base exception for score input errors"""
    pass


class InvalidSetNumberError(ScoreInputError):
    """Set number outside the range allowed by the league format"""
    pass


def normalize_league_format(league_format: Optional[str]) -> str:
    """Upper-case a league format tag; missing means USTA."""
    if not league_format:
        return LEAGUE_USTA
    value = league_format.strip().upper()
    if value not in LEAGUE_FORMATS:
        raise ScoreInputError(f"Unknown league format: {league_format}")
    return value


def max_games_for(league_format: str) -> int:
    return MAX_CUP_GAMES if league_format == LEAGUE_CUP else MAX_SET_GAMES


def set_numbers_for(league_format: str) -> range:
    return range(1, 2) if league_format == LEAGUE_CUP else range(1, MAX_SETS + 1)


def parse_games(value: Any, max_games: int = MAX_SET_GAMES) -> Optional[int]:
    """Coerce a raw game count to an int, or None when it is not a usable count."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        games = value
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            games = int(text)
        except ValueError:
            return None
    else:
        return None
    if games < 0 or games > max_games:
        return None
    return games


# ============================================================================
# Set-level rules
# ============================================================================


def set_winner(home_games: int, away_games: int, league_format: str = LEAGUE_USTA) -> Optional[Side]:
    """Winner of a recorded set, or None when the set has no winner.

    Swapping the arguments always swaps the answer.
    """
    if league_format == LEAGUE_CUP:
        if home_games > away_games:
            return Side.HOME
        if away_games > home_games:
            return Side.AWAY
        return None

    if home_games >= 6 and home_games - away_games >= 2:
        return Side.HOME
    if away_games >= 6 and away_games - home_games >= 2:
        return Side.AWAY
    if home_games == 7 and away_games == 6:
        return Side.HOME
    if away_games == 7 and home_games == 6:
        return Side.AWAY
    return None


def is_valid_set_score(home_games: int, away_games: int) -> bool:
    """Whether a score is a plausible finished tennis set (advisory only)."""
    if home_games < 0 or away_games < 0:
        return False
    if home_games > 7 or away_games > 7:
        return False
    if home_games < 6 and away_games < 6:
        return False
    if home_games == 7 and away_games not in (5, 6):
        return False
    if away_games == 7 and home_games not in (5, 6):
        return False
    return set_winner(home_games, away_games) is not None


def requires_tiebreak(home_games: int, away_games: int) -> bool:
    return (home_games, away_games) in ((7, 6), (6, 7))


# ============================================================================
# Score sheet
# ============================================================================


@dataclass(frozen=True)
class SetEntry:
    set_number: int
    home_games: Optional[int] = None
    away_games: Optional[int] = None
    tiebreak: bool = False

    @property
    def is_recorded(self) -> bool:
        return self.home_games is not None and self.away_games is not None

    def display(self) -> str:
        text = f"{self.home_games}-{self.away_games}"
        return f"{text}(TB)" if self.tiebreak else text


@dataclass(frozen=True)
class CourtOutcome:
    sets_won_home: int
    sets_won_away: int
    recorded_sets: int
    winner: Optional[Side]

    @property
    def won(self) -> bool:
        return self.winner is Side.HOME

    @property
    def is_decided(self) -> bool:
        return self.winner is not None


@dataclass(frozen=True)
class ScoreSheet:
    league_format: str = LEAGUE_USTA
    courts: Mapping[int, Mapping[int, SetEntry]] = field(default_factory=dict)

    @classmethod
    def from_set_scores(cls, league_format: Optional[str], lineups, set_scores) -> "ScoreSheet":
        """Rebuild a sheet from persisted Lineup and SetScore rows."""
        fmt = normalize_league_format(league_format)
        court_by_lineup = {lineup.id: lineup.court_number for lineup in lineups}
        courts: Dict[int, Dict[int, SetEntry]] = {}
        for score in set_scores:
            court_number = court_by_lineup.get(score.lineup_id)
            if court_number is None:
                continue
            courts.setdefault(court_number, {})[score.set_number] = SetEntry(
                set_number=score.set_number,
                home_games=score.home_games,
                away_games=score.away_games,
                tiebreak=bool(score.tiebreak) and fmt != LEAGUE_CUP,
            )
        return cls(league_format=fmt, courts=courts)

    def sets_for(self, court_number: int) -> List[SetEntry]:
        return [entry for _, entry in sorted(self.courts.get(court_number, {}).items())]

    def recorded_sets(self, court_number: int) -> List[SetEntry]:
        return [entry for entry in self.sets_for(court_number) if entry.is_recorded]

    def has_recorded_set(self, court_number: int) -> bool:
        return bool(self.recorded_sets(court_number))


def record_set(
    sheet: ScoreSheet,
    court_number: int,
    set_number: int,
    home_games: Any,
    away_games: Any,
    tiebreak: bool = False,
) -> ScoreSheet:
    """Return a sheet with one set's input replaced.

    Both counts blank removes the set entirely.

    Raises:
        InvalidSetNumberError: set_number outside the format's range
    """
    fmt = sheet.league_format
    if set_number not in set_numbers_for(fmt):
        raise InvalidSetNumberError(f"Set {set_number} is not valid for {fmt} format")

    max_games = max_games_for(fmt)
    home = parse_games(home_games, max_games)
    away = parse_games(away_games, max_games)

    court_sets = dict(sheet.courts.get(court_number, {}))
    if home is None and away is None:
        court_sets.pop(set_number, None)
    else:
        court_sets[set_number] = SetEntry(
            set_number=set_number,
            home_games=home,
            away_games=away,
            tiebreak=bool(tiebreak) and fmt != LEAGUE_CUP,
        )

    courts = dict(sheet.courts)
    if court_sets:
        courts[court_number] = court_sets
    else:
        courts.pop(court_number, None)
    return replace(sheet, courts=courts)


# ============================================================================
# Court-level outcome
# ============================================================================


def court_outcome(sheet: ScoreSheet, court_number: int) -> CourtOutcome:
    """Outcome of one court from its recorded sets.

    CUP: the single total-games set decides the court directly.
    USTA/FLEX: majority of set wins among recorded sets; a split leaves
    the winner undefined.
    """
    recorded = sheet.recorded_sets(court_number)
    home_sets = 0
    away_sets = 0
    for entry in recorded:
        winner = set_winner(entry.home_games, entry.away_games, sheet.league_format)
        if winner is Side.HOME:
            home_sets += 1
        elif winner is Side.AWAY:
            away_sets += 1

    if home_sets > away_sets:
        winner = Side.HOME
    elif away_sets > home_sets:
        winner = Side.AWAY
    else:
        winner = None

    return CourtOutcome(
        sets_won_home=home_sets,
        sets_won_away=away_sets,
        recorded_sets=len(recorded),
        winner=winner,
    )


def format_score_display(entries: Iterable[SetEntry]) -> str:
    """Format recorded sets like '6-4, 3-6, 7-6(TB)'."""
    recorded = sorted((e for e in entries if e.is_recorded), key=lambda e: e.set_number)
    if not recorded:
        return "No score"
    return ", ".join(entry.display() for entry in recorded)


def score_warnings(sheet: ScoreSheet, court_numbers: Iterable[int]) -> List[str]:
    """Advisory notes about odd-looking scores. Never blocks a save."""
    warnings: List[str] = []
    for court_number in court_numbers:
        recorded = sheet.recorded_sets(court_number)
        if sheet.league_format != LEAGUE_CUP:
            for entry in recorded:
                label = f"Court {court_number} set {entry.set_number}"
                if not is_valid_set_score(entry.home_games, entry.away_games):
                    warnings.append(f"{label}: {entry.home_games}-{entry.away_games} is not a finished set")
                elif entry.tiebreak and not requires_tiebreak(entry.home_games, entry.away_games):
                    warnings.append(f"{label}: tiebreak marked on a {entry.home_games}-{entry.away_games} set")
                elif not entry.tiebreak and requires_tiebreak(entry.home_games, entry.away_games):
                    warnings.append(f"{label}: 7-6 set is not marked as a tiebreak")
        if recorded and not court_outcome(sheet, court_number).is_decided:
            warnings.append(f"Court {court_number}: no winner yet from the recorded sets")
    return warnings
