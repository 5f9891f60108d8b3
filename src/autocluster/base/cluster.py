"""
A single cluster: its representative point and current members.

In centroid mode the cluster keeps a running sum of member locations, so the
centroid can be recomputed in O(1) after any insert or remove.
"""

from typing import Generic, Iterator, List, Optional, TypeVar

from .location import Location

T = TypeVar('T')


class Cluster(Generic[T]):
    """One group of points around a representative location.

    Args:
        representative: Centroid or medoid of the cluster
        accumulate: Track ``sum_of_locations`` for centroid updates
    """

    def __init__(self, representative: Location, accumulate: bool = True):
        self.representative = representative
        self.members: List[T] = []
        self.sum_of_locations: Optional[Location] = (
            type(representative).zero(representative.dimension) if accumulate else None
        )

    @property
    def accumulates_sum(self) -> bool:
        return self.sum_of_locations is not None

    @property
    def size(self) -> int:
        return len(self.members)

    @property
    def is_empty(self) -> bool:
        return not self.members

    def insert(self, point: T) -> None:
        """Append ``point`` to the members."""
        self.members.append(point)
        if self.sum_of_locations is not None:
            self.sum_of_locations = self.sum_of_locations + point.location

    def remove(self, point: T) -> Optional[T]:
        """Remove the first member equal to ``point``.

        Returns:
            The removed member, or None if no member equals ``point``
        """
        for index, member in enumerate(self.members):
            if member == point:
                removed = self.members.pop(index)
                if self.sum_of_locations is not None:
                    self.sum_of_locations = self.sum_of_locations - removed.location
                return removed
        return None

    def combine(self, other: 'Cluster[T]') -> None:
        """Absorb the members of ``other`` and recompute the centroid."""
        if self.sum_of_locations is None or other.sum_of_locations is None:
            raise ValueError("combine requires clusters that track location sums")
        self.members.extend(other.members)
        self.sum_of_locations = self.sum_of_locations + other.sum_of_locations
        self.update_centroid()

    @property
    def center(self) -> Location:
        """Mean member location, or the representative if the cluster is empty."""
        if self.is_empty:
            return self.representative
        if self.sum_of_locations is not None:
            return self.sum_of_locations / self.size
        total = type(self.representative).zero(self.representative.dimension)
        for member in self.members:
            total = total + member.location
        return total / self.size

    def update_centroid(self) -> None:
        """Move the representative to the mean; an empty cluster keeps its last one."""
        if self.is_empty:
            return
        self.representative = self.center

    def dispersion(self) -> float:
        """Mean distance from members to the representative."""
        if self.is_empty:
            return 0.0
        total = sum(self.representative.distance(m.location) for m in self.members)
        return total / self.size

    def __len__(self) -> int:
        return self.size

    def __iter__(self) -> Iterator[T]:
        return iter(self.members)

    def __eq__(self, other: object) -> bool:
        # Clusters are identified by their representative, not by membership
        if not isinstance(other, Cluster):
            return NotImplemented
        return self.representative == other.representative

    def __repr__(self) -> str:
        return f"Cluster(representative={self.representative!r}, size={self.size})"
