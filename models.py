# Directory: models.py
"""
Core data models for the secret santa assignment engine.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, Iterator, List, Optional, Set, Tuple

from errors import ConfigurationError


@dataclass(frozen=True)
class Person:
    """A participant, identified by name. The email is only used downstream."""

    name: str
    email: str = ""

    def __str__(self) -> str:
        return f"{self.name} <{self.email}>" if self.email else self.name


@dataclass(frozen=True, order=True)
class Pair:
    """An ordered giver -> receiver edge."""

    giver: str
    receiver: str

    def reversed(self) -> "Pair":
        return Pair(self.receiver, self.giver)

    def is_self_pair(self) -> bool:
        return self.giver == self.receiver

    def __repr__(self) -> str:
        return f"Pair({self.giver} -> {self.receiver})"

    @classmethod
    def from_dict(cls, data: Any) -> "Pair":
        """Build a pair from a ``{"giver": ..., "receiver": ...}`` record."""
        if isinstance(data, Pair):
            return data
        try:
            giver, receiver = data["giver"], data["receiver"]
        except (KeyError, TypeError):
            raise ConfigurationError([f"malformed pair {data!r}"])
        if not isinstance(giver, str) or not isinstance(receiver, str):
            raise ConfigurationError([f"malformed pair {data!r}"])
        return cls(giver, receiver)

    def to_dict(self) -> Dict[str, str]:
        return {"giver": self.giver, "receiver": self.receiver}


@dataclass
class HistoryRecord:
    """Pairs drawn in a past year; they are excluded only if `exclude_pairs` is set."""

    year: int
    exclude_pairs: bool
    pairs: List[Pair] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HistoryRecord":
        try:
            year = int(data["year"])
            exclude_pairs = data.get("exclude_pairs", False)
            pairs = [Pair.from_dict(p) for p in data.get("pairs", [])]
        except (KeyError, TypeError, ValueError, AttributeError):
            raise ConfigurationError([f"malformed history record {data!r}"])
        if not isinstance(exclude_pairs, bool):
            raise ConfigurationError([f"malformed history record {data!r}"])
        return cls(year=year, exclude_pairs=exclude_pairs, pairs=pairs)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "year": self.year,
            "exclude_pairs": self.exclude_pairs,
            "pairs": [p.to_dict() for p in self.pairs],
        }


@dataclass
class Roster:
    """The people taking part in this run, in input order."""

    people: List[Person] = field(default_factory=list)

    def __iter__(self) -> Iterator[Person]:
        return iter(self.people)

    def __len__(self) -> int:
        return len(self.people)

    def __contains__(self, name: object) -> bool:
        return any(p.name == name for p in self.people)

    def names(self) -> List[str]:
        return [p.name for p in self.people]

    def by_name(self) -> Dict[str, Person]:
        return {p.name: p for p in self.people}

    def email_for(self, name: str) -> str:
        for person in self.people:
            if person.name == name:
                return person.email
        raise KeyError(name)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Roster":
        """Build a roster from the ``people`` field of an input record."""
        people = []
        for entry in data.get("people", []):
            try:
                people.append(Person(name=entry["name"], email=entry.get("email", "")))
            except (KeyError, TypeError, AttributeError):
                raise ConfigurationError([f"malformed person {entry!r}"])
        return cls(people=people)

    def to_dict(self) -> Dict[str, Any]:
        return {"people": [{"name": p.name, "email": p.email} for p in self.people]}


@dataclass
class ConstraintSet:
    """Forced pairs, forbidden pairs, households and history for one run."""

    whitelist: List[Pair] = field(default_factory=list)
    blacklist: List[Pair] = field(default_factory=list)
    blacklist_sets: List[List[str]] = field(default_factory=list)
    history: List[HistoryRecord] = field(default_factory=list)

    def referenced_names(self) -> Set[str]:
        """Every name mentioned by any constraint."""
        names: Set[str] = set()
        for pair in self.whitelist + self.blacklist:
            names.update((pair.giver, pair.receiver))
        for members in self.blacklist_sets:
            names.update(members)
        for record in self.history:
            for pair in record.pairs:
                names.update((pair.giver, pair.receiver))
        return names

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ConstraintSet":
        """Build constraints from the nested input record."""
        sets = []
        for members in data.get("blacklist_sets", []):
            try:
                valid = not isinstance(members, str) and all(isinstance(m, str) for m in members)
            except TypeError:
                valid = False
            if not valid:
                raise ConfigurationError([f"malformed blacklist set {members!r}"])
            sets.append(list(members))

        return cls(
            whitelist=[Pair.from_dict(p) for p in data.get("whitelist", [])],
            blacklist=[Pair.from_dict(p) for p in data.get("blacklist", [])],
            blacklist_sets=sets,
            history=[HistoryRecord.from_dict(h) for h in data.get("history", [])],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "whitelist": [p.to_dict() for p in self.whitelist],
            "blacklist": [p.to_dict() for p in self.blacklist],
            "blacklist_sets": [list(s) for s in self.blacklist_sets],
            "history": [h.to_dict() for h in self.history],
        }


def load_input(data: Dict[str, Any]) -> Tuple[Roster, ConstraintSet]:
    """Split a nested input record into the roster and its constraints."""
    return Roster.from_dict(data), ConstraintSet.from_dict(data)


@dataclass(frozen=True)
class NormalizedConstraints:
    """
    Validated constraints reduced to one forced and one forbidden relation.

    `forbidden` maps each forbidden pair to the reasons that forbid it, so that
    an infeasibility report can tell a person which rule to relax.
    """

    names: Tuple[str, ...]
    forced: Dict[str, str]
    forbidden: Dict[Pair, FrozenSet[str]]

    def __post_init__(self):
        object.__setattr__(
            self, "_forced_givers", {r: g for g, r in self.forced.items()}
        )

    def is_forbidden(self, giver: str, receiver: str) -> bool:
        return Pair(giver, receiver) in self.forbidden

    def reasons(self, giver: str, receiver: str) -> FrozenSet[str]:
        return self.forbidden.get(Pair(giver, receiver), frozenset())

    def forced_giver_of(self, receiver: str) -> Optional[str]:
        return self._forced_givers.get(receiver)

    def candidates(self, giver: str) -> List[str]:
        """Receivers the giver could get, ignoring everyone else's draw."""
        if giver in self.forced:
            return [self.forced[giver]]
        return [
            r
            for r in self.names
            if not self.is_forbidden(giver, r) and self.forced_giver_of(r) is None
        ]

    def with_forbidden(self, pairs: Iterable[Pair], reason: str) -> "NormalizedConstraints":
        """Return a copy with extra forbidden pairs; forced pairs are kept."""
        forbidden = dict(self.forbidden)
        for pair in pairs:
            if self.forced.get(pair.giver) == pair.receiver:
                continue
            forbidden[pair] = forbidden.get(pair, frozenset()) | {reason}
        return NormalizedConstraints(
            names=self.names, forced=dict(self.forced), forbidden=forbidden
        )


@dataclass
class Solution:
    """A complete draw: every giver mapped to exactly one receiver."""

    assignments: Dict[str, str]
    people: Dict[str, Person]
    seed: Optional[int] = None
    steps: int = 0

    def __len__(self) -> int:
        return len(self.assignments)

    @property
    def pairs(self) -> List[Pair]:
        """Pairs sorted by giver name."""
        return sorted(Pair(g, r) for g, r in self.assignments.items())

    def receiver_of(self, giver: str) -> Person:
        return self.people[self.assignments[giver]]

    def deliveries(self) -> List[Tuple[Person, Person]]:
        """(giver, receiver) people, for whoever sends the notifications."""
        return [(self.people[p.giver], self.people[p.receiver]) for p in self.pairs]

    def to_history(self, year: int, exclude_pairs: bool = True) -> HistoryRecord:
        """Record this draw so that next year's run can exclude it."""
        return HistoryRecord(year=year, exclude_pairs=exclude_pairs, pairs=self.pairs)

    def __repr__(self) -> str:
        pairs = ", ".join(f"{p.giver}->{p.receiver}" for p in self.pairs)
        return f"Solution({pairs}, seed={self.seed}, steps={self.steps})"
