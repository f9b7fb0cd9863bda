# Directory: utils/generators.py
"""
Utility functions for generating rosters, households and past draws.
"""
import random
from typing import Any, Dict, List, Optional, Tuple

from faker import Faker

from assignment.backtracking import BacktrackingAssigner
from assignment.history import select_history_window
from errors import SantaError
from models import ConstraintSet, HistoryRecord, Pair, Person, Roster
from utils.logger import logger


def sample_input() -> Dict[str, Any]:
    """
    The three-person example input.

    Sean -> Shane is both whitelisted and blacklisted, so validating it fails;
    it doubles as a template for organizers writing their own input.
    """
    return {
        "people": [
            {"name": "John", "email": "john@email.com"},
            {"name": "Sean", "email": "sean@email.com"},
            {"name": "Shane", "email": "shane@email.com"},
        ],
        "whitelist": [{"giver": "Sean", "receiver": "Shane"}],
        "blacklist": [{"giver": "Sean", "receiver": "Shane"}],
        "blacklist_sets": [["John", "Sean"]],
        "history": [
            {
                "year": 2024,
                "exclude_pairs": True,
                "pairs": [
                    {"giver": "John", "receiver": "Shane"},
                    {"giver": "Sean", "receiver": "John"},
                    {"giver": "Shane", "receiver": "Sean"},
                ],
            }
        ],
    }


class DataGenerator:
    """Generator for test data: people, households and history."""

    def __init__(self, seed: int = 42, config: Optional[Dict[str, Any]] = None):
        """
        Initialize the generator with a specific seed and optional configuration.

        Args:
            seed: Random seed for reproducibility
            config: Optional configuration settings
        """
        self.seed = seed
        self.rng = random.Random(seed)
        self.fake = Faker()
        self.fake.seed_instance(seed)

        self.config = config or {
            "household_size_min": 2,
            "household_size_max": 3,
            "history_lookback_years": 1,
            "first_history_year": 2020,
        }

    def generate_people(self, num_people: int) -> Roster:
        """
        Generate a roster of people with unique names.

        Args:
            num_people: Number of people to generate

        Returns:
            Roster: Generated people
        """
        people = []
        for _ in range(num_people):
            name = self.fake.unique.first_name()
            email = f"{name.lower()}@{self.fake.free_email_domain()}"
            people.append(Person(name=name, email=email))
            logger.debug(f"Created person: {people[-1]}")

        logger.info(f"Generated {len(people)} people.")
        return Roster(people=people)

    def generate_households(self, roster: Roster, num_households: int) -> List[List[str]]:
        """
        Group some of the people into disjoint households.

        Households are only formed while enough unassigned people remain, so
        fewer than `num_households` may be returned for a small roster.
        """
        names = roster.names()
        self.rng.shuffle(names)

        households = []
        for _ in range(num_households):
            size = self.rng.randint(
                self.config["household_size_min"], self.config["household_size_max"]
            )
            if len(names) < size:
                break
            household, names = names[:size], names[size:]
            households.append(sorted(household))

        logger.info(f"Generated {len(households)} households.")
        return households

    def generate_history(
        self,
        roster: Roster,
        households: List[List[str]],
        num_years: int,
    ) -> List[HistoryRecord]:
        """
        Generate past draws, each valid under the rules of its own year.

        Every year excludes the draws inside the configured lookback window, as
        an organizer using the engine each year would. Generation stops early
        if a year has no valid draw.

        Args:
            roster: People taking part
            households: Household sets applied every year
            num_years: Number of past years to generate

        Returns:
            List[HistoryRecord]: Records oldest first
        """
        history: List[HistoryRecord] = []
        first_year = self.config["first_history_year"]

        for offset in range(num_years):
            year = first_year + offset
            window = select_history_window(
                history,
                lookback_years=self.config["history_lookback_years"],
                current_year=year,
            )
            constraints = ConstraintSet(blacklist_sets=households, history=window)
            assigner = BacktrackingAssigner(seed=self.rng.randrange(1 << 30))
            try:
                solution = assigner.assign(roster, constraints)
            except SantaError as e:
                logger.warning(f"No history generated for {year}: {e}")
                break
            history.append(solution.to_history(year))

        logger.info(f"Generated {len(history)} years of history.")
        return history

    def generate_blacklist(self, roster: Roster, num_pairs: int) -> List[Pair]:
        """Pick random forbidden pairs (never self-pairs)."""
        names = roster.names()
        pairs = set()
        attempts = 0
        while len(pairs) < num_pairs and attempts < num_pairs * 10 and len(names) > 1:
            giver, receiver = self.rng.sample(names, 2)
            pairs.add(Pair(giver, receiver))
            attempts += 1
        return sorted(pairs)

    def generate_scenario(
        self,
        num_people: int,
        num_households: int = 0,
        num_years: int = 0,
        num_blacklisted: int = 0,
    ) -> Tuple[Roster, ConstraintSet]:
        """
        Generate a complete scenario with people and constraints.

        Args:
            num_people: Number of people to generate
            num_households: Number of household sets
            num_years: Years of history to generate
            num_blacklisted: Number of extra forbidden pairs

        Returns:
            Tuple[Roster, ConstraintSet]: Generated roster and constraints
        """
        roster = self.generate_people(num_people)
        households = self.generate_households(roster, num_households)
        history = self.generate_history(roster, households, num_years)
        blacklist = self.generate_blacklist(roster, num_blacklisted)

        return roster, ConstraintSet(
            blacklist=blacklist,
            blacklist_sets=households,
            history=history,
        )
