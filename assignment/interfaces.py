# Directory: assignment/interfaces.py
"""
Interfaces for secret santa assignment models.
"""
from abc import ABC, abstractmethod
from models import ConstraintSet, Roster, Solution


class AssignmentModel(ABC):
    """Base interface for secret santa assignment models."""

    @abstractmethod
    def assign(self, roster: Roster, constraints: ConstraintSet) -> Solution:
        """
        Assign every person exactly one receiver.

        Args:
            roster: People taking part in this run
            constraints: Forced and forbidden pairs, households and history

        Returns:
            Solution mapping each giver to a receiver

        Raises:
            SantaError: If the input is invalid or no draw could be found
        """
        pass
