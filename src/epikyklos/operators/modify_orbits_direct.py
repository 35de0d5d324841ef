'''Semi-major axis migration operator

Particles with ``tau_a`` set have their osculating semi-major axis
multiplied by exp(dt/tau_a) every step, relative to particle 0.
The relative position is scaled by k and the relative velocity by
k**-0.5, which maps a Kepler orbit onto a similar orbit with a scaled
by k and the same eccentricity and orientation.
'''

import numpy as np
from typing import TYPE_CHECKING
from ..extras import register_operator
from ..config import config

if TYPE_CHECKING:
    from ..extras import Operator
    from ..simulation import Simulation


@register_operator("modify_orbits_direct")
def modify_orbits_direct(sim: "Simulation", operator: "Operator", dt: float) -> None:
    primary = sim.particles[0]
    r0 = primary.position
    v0 = primary.velocity
    for p in sim.particles[1:sim.N_real]:
        if p.tau_a is None:
            continue
        rel_r = p.position - r0
        rel_v = p.velocity - v0
        # no orbit to rescale
        if np.linalg.norm(rel_r) <= config.TINY:
            continue
        k = np.exp(dt / p.tau_a)
        p.position = r0 + k * rel_r
        p.velocity = v0 + rel_v / np.sqrt(k)
