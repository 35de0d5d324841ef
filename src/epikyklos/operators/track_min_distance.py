'''Minimum distance tracking operator

For every particle with ``min_distance`` set, lowers ``min_distance`` to
the current separation from particle ``min_distance_from`` whenever the
two come closer than the stored value.
'''

import numpy as np
from typing import TYPE_CHECKING
from ..extras import register_operator

if TYPE_CHECKING:
    from ..extras import Operator
    from ..simulation import Simulation


@register_operator("track_min_distance")
def track_min_distance(sim: "Simulation", operator: "Operator", dt: float) -> None:
    n_real = sim.N_real
    for k in range(n_real):
        p = sim.particles[k]
        if p.min_distance is None:
            continue
        j = p.min_distance_from
        # target must be another real particle
        if j == k or not 0 <= j < n_real:
            continue
        d = float(np.linalg.norm(p.position - sim.particles[j].position))
        if d < p.min_distance:
            p.min_distance = d
