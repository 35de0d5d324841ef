'''Particle class definition for the Epikyklos N-body effects package'''

import numpy as np
from typing import Optional
from .utils import validation_error

class Particle:
    """
    A point mass in an N-body Simulation, with optional per-particle
    effect parameters.

    Cartesian state is owned by the Simulation integrator. The effect
    fields are plain optional attributes: an effect acts on a particle
    only when the fields it reads are set (not None).

    Parameters
    ----------
    m : float, optional
        Mass (default 0, a test particle)
    x, y, z : float, optional
        Position components
    vx, vy, vz : float, optional
        Velocity components
    name : str, optional
        Particle identifier
    min_a, max_a : float, optional
        Bounds of the osculating semi-major axis, updated by the
        ``track_minmax_a`` operator. Both must be set for tracking.
    tau_a : float, optional
        Semi-major axis e-folding time used by ``modify_orbits_direct``.
        Negative values shrink the orbit.
    min_distance : float, optional
        Smallest distance seen so far, updated by ``track_min_distance``.
    min_distance_from : int, optional
        Index of the particle distances are measured from (default 0).
    """
    # Effect parameter fields, in display order
    _EFFECT_FIELDS = ("min_a", "max_a", "tau_a",
                      "min_distance", "min_distance_from")

    def __init__(
        self,
        m: float = 0.0,
        x: float = 0.0, y: float = 0.0, z: float = 0.0,
        vx: float = 0.0, vy: float = 0.0, vz: float = 0.0,
        name: Optional[str] = None,
        min_a: Optional[float] = None,
        max_a: Optional[float] = None,
        tau_a: Optional[float] = None,
        min_distance: Optional[float] = None,
        min_distance_from: int = 0,
    ):
        state = np.array([x, y, z, vx, vy, vz], dtype=float)
        if not np.all(np.isfinite(state)):
            validation_error(f"Particle state contains NaN or Inf values: {state}")
        if not np.isfinite(m) or m < 0:
            validation_error(f"Mass must be finite and non-negative, got {m}")
        if tau_a is not None and tau_a == 0:
            validation_error("tau_a must be non-zero (use None to disable migration)")

        self.m = float(m)
        self.x, self.y, self.z = float(x), float(y), float(z)
        self.vx, self.vy, self.vz = float(vx), float(vy), float(vz)
        self.name = name

        self.min_a = min_a
        self.max_a = max_a
        self.tau_a = tau_a
        self.min_distance = min_distance
        self.min_distance_from = int(min_distance_from)

    # ========== STATE ACCESS ==========
    @property
    def position(self) -> np.ndarray:
        """Position vector [x, y, z] (copy)"""
        return np.array([self.x, self.y, self.z])

    @position.setter
    def position(self, value):
        self.x, self.y, self.z = (float(c) for c in value)

    @property
    def velocity(self) -> np.ndarray:
        """Velocity vector [vx, vy, vz] (copy)"""
        return np.array([self.vx, self.vy, self.vz])

    @velocity.setter
    def velocity(self, value):
        self.vx, self.vy, self.vz = (float(c) for c in value)

    @property
    def state(self) -> np.ndarray:
        """Cartesian state [x, y, z, vx, vy, vz] (copy)"""
        return np.array([self.x, self.y, self.z, self.vx, self.vy, self.vz])

    @state.setter
    def state(self, value):
        self.x, self.y, self.z, self.vx, self.vy, self.vz = (float(c) for c in value)

    @property
    def tracks_a(self) -> bool:
        """True if both semi-major axis bounds are set"""
        return self.min_a is not None and self.max_a is not None

    # ========== SPECIAL METHODS ==========
    def __repr__(self) -> str:
        name_str = f"'{self.name}'" if self.name else "unnamed"
        parts = [f"Particle({name_str}, m={self.m:.6g}",
                 f"r=[{self.x:.6g}, {self.y:.6g}, {self.z:.6g}]",
                 f"v=[{self.vx:.6g}, {self.vy:.6g}, {self.vz:.6g}]"]
        for field in self._EFFECT_FIELDS:
            value = getattr(self, field)
            if value is not None and not (field == "min_distance_from"
                                          and self.min_distance is None):
                parts.append(f"{field}={value}")
        return ", ".join(parts) + ")"
