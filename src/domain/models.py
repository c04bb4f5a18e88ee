"""
domain.models - Value objects for trainer discovery.

Immutable data containers with no dependencies on infrastructure.
"""

from __future__ import annotations

from dataclasses import dataclass

from domain.entities import User


@dataclass(frozen=True)
class TrainerFilter:
    """Criteria a client uses to narrow down the trainer list.

    Every field is optional; an empty field does not filter. All matching
    is case-insensitive.

    Attributes:
        search:     Free text matched against name, bio and specialties.
        specialty:  Must equal one of the trainer's specialties.
        location:   Substring of the trainer's location.
    """
    search: str = ""
    specialty: str = ""
    location: str = ""

    @property
    def is_empty(self) -> bool:
        return not (self.search.strip() or self.specialty.strip() or self.location.strip())

    def matches(self, trainer: User) -> bool:
        search = self.search.strip().lower()
        if search:
            haystack = [trainer.name.lower(), trainer.bio.lower()]
            haystack.extend(s.lower() for s in trainer.specialties)
            if not any(search in text for text in haystack):
                return False

        specialty = self.specialty.strip().lower()
        if specialty and specialty not in {s.strip().lower() for s in trainer.specialties}:
            return False

        location = self.location.strip().lower()
        if location and location not in trainer.location.lower():
            return False

        return True

    def apply(self, trainers: list[User]) -> list[User]:
        if self.is_empty:
            return list(trainers)
        return [t for t in trainers if self.matches(t)]
