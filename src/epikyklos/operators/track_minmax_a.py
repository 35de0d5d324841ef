'''Semi-major axis range tracking operator

For every particle with both ``min_a`` and ``max_a`` set, computes the
osculating semi-major axis relative to the primary each step and widens
the stored bounds when the orbit leaves them. The bounds must be seeded
by the user (e.g. with the initial semi-major axis, or -inf/inf); the
operator never creates or clears them.
'''

from typing import Sequence, TYPE_CHECKING
from ..extras import register_operator
from ..orbital_elements import OrbitError, orbit_from_particle

if TYPE_CHECKING:
    from ..extras import Operator
    from ..particle import Particle
    from ..simulation import Simulation


def update_minmax_a(particles: Sequence["Particle"], G: float,
                    primary_index: int = 0, n_var: int = 0) -> None:
    """
    Widen the ``min_a``/``max_a`` bounds of every opted-in particle.

    Parameters
    ----------
    particles : sequence of Particle
        All particles, variational particles last
    G : float
        Gravitational constant
    primary_index : int, optional
        Index of the reference particle (default 0), never tracked itself
    n_var : int, optional
        Number of trailing variational particles, never tracked
    """
    primary = particles[primary_index]
    for k in range(len(particles) - n_var):
        if k == primary_index:
            continue
        p = particles[k]
        if p.min_a is None or p.max_a is None:
            continue
        try:
            a = orbit_from_particle(G, p, primary).a
        except OrbitError:
            continue
        if a < p.min_a:
            p.min_a = a
        if a > p.max_a:
            p.max_a = a


@register_operator("track_minmax_a")
def track_minmax_a(sim: "Simulation", operator: "Operator", dt: float) -> None:
    """Operator callback: track semi-major axis bounds relative to particle 0."""
    update_minmax_a(sim.particles, sim.G, primary_index=0, n_var=sim.N_var)
