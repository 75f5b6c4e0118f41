"""
Closed-form projectile simulation.
A thrown orb follows position = p0 + v*t + 0.5*g*t^2 and shrinks linearly
over its lifetime, then disappears.
"""
from dataclasses import dataclass
import itertools
import logging
from typing import Dict, List, Optional

import numpy as np

from .config import ProjectileConfig
from .skeleton import HandSide, Vector, as_vector

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class Projectile:
    """
    A launched projectile.

    Attributes:
        id: Unique per launch
        initial_position: World position at launch (metres)
        launch_velocity: World velocity at launch (m/s)
        start_time: Clock time of the launch
        lifetime: Seconds before removal
        side: Hand that threw it
    """
    id: int
    initial_position: np.ndarray
    launch_velocity: np.ndarray
    start_time: float
    gravity: np.ndarray
    lifetime: float = 3.0
    side: Optional[HandSide] = None
    shrink: float = 0.8
    min_scale: float = 0.1

    def elapsed(self, now: float) -> float:
        # Clock readings before the launch are treated as the launch instant
        return max(0.0, now - self.start_time)

    def is_expired(self, t: float) -> bool:
        return t > self.lifetime

    def position_at(self, t: float) -> np.ndarray:
        return self.initial_position + self.launch_velocity * t + 0.5 * self.gravity * t * t

    def scale_at(self, t: float) -> float:
        life_fraction = t / self.lifetime
        return max(self.min_scale, 1.0 - life_fraction * self.shrink)


@dataclass(frozen=True, eq=False)
class ProjectileView:
    """What a renderer needs for one live projectile."""
    id: int
    side: Optional[HandSide]
    position: np.ndarray
    scale: float


class ProjectileSimulator:
    """Owns all live projectiles from both hands."""

    def __init__(self, config: Optional[ProjectileConfig] = None):
        self._config = config or ProjectileConfig()
        self._gravity = as_vector(self._config.gravity)
        self._live: Dict[int, Projectile] = {}
        self._ids = itertools.count(1)
        self._views: List[ProjectileView] = []

    def launch(
        self,
        position: Vector,
        detector_velocity: Vector,
        now: float,
        side: Optional[HandSide] = None,
    ) -> Projectile:
        """
        Spawn a projectile.

        Args:
            position: World launch position
            detector_velocity: Wrist velocity reported by the throw detector;
                scaled by ``launch_multiplier``.
            now: Launch time
            side: Throwing hand
        """
        velocity = np.asarray(detector_velocity, dtype=float) * self._config.launch_multiplier
        projectile = Projectile(
            id=next(self._ids),
            initial_position=as_vector(position),
            launch_velocity=as_vector(velocity),
            start_time=float(now),
            gravity=self._gravity,
            lifetime=self._config.lifetime,
            side=side,
            shrink=self._config.shrink,
            min_scale=self._config.min_scale,
        )
        self._live[projectile.id] = projectile
        logger.info(
            "Projectile %d launched from %s at speed %.2f m/s",
            projectile.id,
            side.value if side else "unknown hand",
            float(np.linalg.norm(velocity)),
        )
        return projectile

    def advance(self, now: float) -> List[ProjectileView]:
        """
        Move every projectile to time ``now`` and drop expired ones.

        Returns:
            Position and scale of each remaining projectile, in launch order.
        """
        views = []
        for pid, projectile in list(self._live.items()):
            t = projectile.elapsed(now)
            if projectile.is_expired(t):
                del self._live[pid]
                logger.debug("Projectile %d expired after %.2fs", pid, t)
                continue
            views.append(ProjectileView(
                id=pid,
                side=projectile.side,
                position=projectile.position_at(t),
                scale=projectile.scale_at(t),
            ))
        self._views = views
        return list(views)

    def active_projectiles(self) -> List[ProjectileView]:
        """Views produced by the last ``advance``."""
        return list(self._views)

    def clear(self) -> None:
        self._live.clear()
        self._views = []

    def __len__(self) -> int:
        return len(self._live)
