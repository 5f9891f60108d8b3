"""
Location values for clustering.

A Location is an immutable vector in a metric space. The metric lives on the
class: ``pairwise_distances`` is the batched form every algorithm uses, and
``distance`` is defined through it so that both always agree. Subclasses that
want a different metric (see ``GeoLocation``) only override
``pairwise_distances``.
"""

from typing import Iterable, Iterator, Sequence, Type, Union

import numpy as np
import torch
from torch import Tensor


CoordinatesLike = Union[Sequence[float], np.ndarray, Tensor, "Location"]

# Mean Earth radius (IUGG)
EARTH_RADIUS_KM = 6371.0088


class Location:
    """Immutable vector of real coordinates.

    Coordinates are stored as a float64 CPU tensor. Arithmetic returns new
    instances of the same class; nothing mutates an existing Location.

    Examples
    --------
    >>> a = Location([0.0, 0.0])
    >>> b = Location([3.0, 4.0])
    >>> a.distance(b)
    5.0
    >>> (a + b) / 2
    Location([1.5, 2.0])
    """

    __slots__ = ('_coords', '_hash')

    def __init__(self, coords: CoordinatesLike):
        if isinstance(coords, Location):
            tensor = coords._coords
        elif isinstance(coords, Tensor):
            tensor = coords.detach().to(device='cpu', dtype=torch.float64).clone()
        else:
            tensor = torch.from_numpy(np.array(coords, dtype=np.float64))

        if tensor.dim() != 1:
            raise ValueError(f"Expected 1D coordinates, got {tensor.dim()}D")
        if tensor.numel() == 0:
            raise ValueError("Location needs at least one coordinate")

        self._coords = tensor
        self._hash = None

    @classmethod
    def _from_tensor(cls, tensor: Tensor) -> 'Location':
        """Wrap an owned float64 tensor without copying or validation."""
        obj = cls.__new__(cls)
        obj._coords = tensor
        obj._hash = None
        return obj

    @classmethod
    def zero(cls, dimension: int) -> 'Location':
        """The additive identity in ``dimension`` dimensions."""
        if dimension < 1:
            raise ValueError(f"dimension must be positive, got {dimension}")
        return cls._from_tensor(torch.zeros(dimension, dtype=torch.float64))

    @classmethod
    def from_tensor(cls, row: Tensor) -> 'Location':
        """Build a location from one row of a coordinate matrix."""
        return cls._from_tensor(row.detach().to(device='cpu', dtype=torch.float64).clone())

    @staticmethod
    def stack(locations: Sequence['Location']) -> Tensor:
        """Stack locations into an (n, d) float64 tensor."""
        if len(locations) == 0:
            return torch.zeros(0, 0, dtype=torch.float64)
        dimension = locations[0].dimension
        for location in locations:
            if location.dimension != dimension:
                raise ValueError(
                    f"Mixed dimensions: expected {dimension}, got {location.dimension}"
                )
        return torch.stack([location._coords for location in locations])

    @classmethod
    def pairwise_distances(cls, a: Tensor, b: Tensor) -> Tensor:
        """Euclidean distances between the rows of ``a`` (n, d) and ``b`` (m, d).

        Returns:
            (n, m) float64 tensor
        """
        if a.shape[0] == 0 or b.shape[0] == 0:
            return torch.zeros(a.shape[0], b.shape[0], dtype=torch.float64)
        return torch.cdist(a, b, compute_mode='donot_use_mm_for_euclid_dist')

    def distance(self, other: 'Location') -> float:
        """Distance to ``other`` under this class's metric."""
        self._check_dimension(other)
        pair = type(self).pairwise_distances(
            self._coords.unsqueeze(0), other._coords.unsqueeze(0)
        )
        return pair[0, 0].item()

    @property
    def dimension(self) -> int:
        return self._coords.shape[0]

    def to_numpy(self) -> np.ndarray:
        return self._coords.numpy().copy()

    def tolist(self) -> list:
        return self._coords.tolist()

    def __add__(self, other: 'Location') -> 'Location':
        if not isinstance(other, Location):
            return NotImplemented
        self._check_dimension(other)
        return type(self)._from_tensor(self._coords + other._coords)

    def __sub__(self, other: 'Location') -> 'Location':
        if not isinstance(other, Location):
            return NotImplemented
        self._check_dimension(other)
        return type(self)._from_tensor(self._coords - other._coords)

    def __truediv__(self, scalar: float) -> 'Location':
        if isinstance(scalar, Location):
            return NotImplemented
        if scalar == 0:
            raise ZeroDivisionError("Location division by zero")
        return type(self)._from_tensor(self._coords / float(scalar))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Location):
            return NotImplemented
        return (self.dimension == other.dimension
                and torch.equal(self._coords, other._coords))

    def __hash__(self) -> int:
        if self._hash is None:
            self._hash = hash(tuple(self._coords.tolist()))
        return self._hash

    def __iter__(self) -> Iterator[float]:
        return iter(self._coords.tolist())

    def __len__(self) -> int:
        return self.dimension

    def __getitem__(self, index: int) -> float:
        return self._coords[index].item()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._coords.tolist()})"

    def _check_dimension(self, other: 'Location') -> None:
        if self.dimension != other.dimension:
            raise ValueError(
                f"Dimension mismatch: {self.dimension} vs {other.dimension}"
            )


class GeoLocation(Location):
    """Latitude/longitude pair in degrees with great-circle distance.

    Distances are haversine distances in kilometres. Arithmetic is
    component-wise, which is a fair approximation for centroids of regions
    that do not straddle the antimeridian.
    """

    __slots__ = ()

    def __init__(self, latitude: float, longitude: float):
        super().__init__([latitude, longitude])

    @property
    def latitude(self) -> float:
        return self._coords[0].item()

    @property
    def longitude(self) -> float:
        return self._coords[1].item()

    @classmethod
    def pairwise_distances(cls, a: Tensor, b: Tensor) -> Tensor:
        """Haversine distances in km between (n, 2) and (m, 2) degree tensors."""
        if a.shape[0] == 0 or b.shape[0] == 0:
            return torch.zeros(a.shape[0], b.shape[0], dtype=torch.float64)
        if a.shape[1] != 2 or b.shape[1] != 2:
            raise ValueError("GeoLocation coordinates must be (latitude, longitude)")

        lat1 = torch.deg2rad(a[:, 0]).unsqueeze(1)
        lon1 = torch.deg2rad(a[:, 1]).unsqueeze(1)
        lat2 = torch.deg2rad(b[:, 0]).unsqueeze(0)
        lon2 = torch.deg2rad(b[:, 1]).unsqueeze(0)

        h = (torch.sin((lat2 - lat1) / 2) ** 2
             + torch.cos(lat1) * torch.cos(lat2) * torch.sin((lon2 - lon1) / 2) ** 2)
        h = torch.clamp(h, 0.0, 1.0)
        return 2 * EARTH_RADIUS_KM * torch.asin(torch.sqrt(h))

    def __repr__(self) -> str:
        return f"GeoLocation(latitude={self.latitude}, longitude={self.longitude})"


def metric_of(locations: Iterable[Location]) -> Type[Location]:
    """Location class whose metric applies to ``locations`` (the first one's)."""
    for location in locations:
        return type(location)
    return Location

