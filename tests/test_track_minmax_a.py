"""
Test suite for the semi-major axis range tracking operator.

Tests cover:
- Opt-in behavior (both bounds required, none created)
- Monotonic widening of the bounds
- Exclusion of the primary and of variational particles
- Silent skipping of degenerate orbits
- Operator callback vs explicit-argument entry point
"""

import pytest
import numpy as np
from epikyklos import (
    Particle, Simulation, orbit_from_particle, update_minmax_a,
)
from epikyklos.operators import track_minmax_a


def apply_tracking(sim):
    """Run the operator once through the registered callback."""
    op = sim.extras.load_operator("track_minmax_a")
    op(sim, sim.dt)


def make_sim(*particles, G=1.0):
    sim = Simulation(G=G, dt=0.01)
    for p in particles:
        sim.add(p)
    return sim


class TestOptIn:
    """Tracking only applies to particles with both bounds set."""

    def test_missing_both_bounds_stay_absent(self):
        """A particle without bounds never gains them."""
        sim = make_sim(Particle(m=1.0), Particle(x=1.0, vy=1.2))
        for _ in range(5):
            apply_tracking(sim)
        assert sim[1].min_a is None
        assert sim[1].max_a is None

    def test_only_min_set_is_untouched(self):
        """A lone min_a is not tracked and max_a is not created."""
        sim = make_sim(Particle(m=1.0), Particle(x=1.0, vy=1.2, min_a=5.0))
        apply_tracking(sim)
        assert sim[1].min_a == 5.0
        assert sim[1].max_a is None

    def test_only_max_set_is_untouched(self):
        """A lone max_a is not tracked and min_a is not created."""
        sim = make_sim(Particle(m=1.0), Particle(x=1.0, vy=1.2, max_a=0.1))
        apply_tracking(sim)
        assert sim[1].max_a == 0.1
        assert sim[1].min_a is None

    def test_other_particles_still_tracked(self):
        """Opted-out particles do not stop tracking of later ones."""
        sim = make_sim(Particle(m=1.0),
                       Particle(x=1.0, vy=1.0),
                       Particle(x=2.0, vy=0.5, min_a=10.0, max_a=10.0))
        apply_tracking(sim)
        a = orbit_from_particle(1.0, sim[2], sim[0]).a
        assert sim[2].min_a == a
        assert sim[1].min_a is None


class TestBoundsUpdate:
    """Bounds widen outward and never tighten."""

    def test_circular_orbit_value(self):
        """Circular unit orbit gives exactly a = 1."""
        sim = make_sim(Particle(m=1.0),
                       Particle(x=1.0, vy=1.0, min_a=2.0, max_a=0.5))
        apply_tracking(sim)
        assert sim[1].min_a == 1.0
        assert sim[1].max_a == 1.0

    def test_value_below_range_lowers_min_only(self):
        """a below min_a lowers min_a, max_a unchanged."""
        sim = make_sim(Particle(m=1.0),
                       Particle(x=1.0, vy=1.0, min_a=1.5, max_a=2.0))
        apply_tracking(sim)
        assert sim[1].min_a == 1.0
        assert sim[1].max_a == 2.0

    def test_value_above_range_raises_max_only(self):
        """a above max_a raises max_a, min_a unchanged."""
        sim = make_sim(Particle(m=1.0),
                       Particle(x=1.0, vy=1.0, min_a=0.2, max_a=0.5))
        apply_tracking(sim)
        assert sim[1].min_a == 0.2
        assert sim[1].max_a == 1.0

    def test_value_inside_range_changes_nothing(self):
        """a inside [min_a, max_a] leaves both bounds alone."""
        sim = make_sim(Particle(m=1.0),
                       Particle(x=1.0, vy=1.0, min_a=-1.0, max_a=1.0e9))
        apply_tracking(sim)
        assert sim[1].min_a == -1.0
        assert sim[1].max_a == 1.0e9

    def test_infinite_seeds_collapse_onto_value(self):
        """Seeding with +inf/-inf records the first computed value in both."""
        sim = make_sim(Particle(m=1.0),
                       Particle(x=2.0, vy=0.5, min_a=np.inf, max_a=-np.inf))
        apply_tracking(sim)
        a = orbit_from_particle(1.0, sim[1], sim[0]).a
        assert sim[1].min_a == a
        assert sim[1].max_a == a

    def test_hyperbolic_value_used_verbatim(self):
        """Negative semi-major axis of an unbound orbit is stored as is."""
        sim = make_sim(Particle(m=1.0),
                       Particle(x=1.0, vy=2.0, min_a=1.0, max_a=1.0))
        apply_tracking(sim)
        assert sim[1].min_a == pytest.approx(-1.0 / 2.0)
        assert sim[1].max_a == 1.0

    def test_uses_total_mass_and_G(self):
        """mu = G*(m0 + m) enters the semi-major axis."""
        sim = make_sim(Particle(m=3.0),
                       Particle(m=1.0, x=2.0, vy=1.0, min_a=100.0, max_a=0.0),
                       G=0.5)
        apply_tracking(sim)
        mu = 0.5 * 4.0
        expected = -mu / (1.0 - 2 * mu / 2.0)
        assert sim[1].min_a == pytest.approx(expected, rel=1e-15)
        assert sim[1].max_a == pytest.approx(expected, rel=1e-15)

    @pytest.mark.parametrize("state", [
        (1.0, 0.0, 0.0, 0.0, 1.0, 0.0),
        (0.5, 0.3, -0.1, -0.2, 1.1, 0.3),
        (3.0, -1.0, 0.5, 0.1, 0.4, -0.2),
        (1.0, 1.0, 0.0, -0.9, 0.9, 0.1),
    ])
    def test_monotonic_over_repeated_changes(self, state):
        """Over a sequence of states min_a never rises and max_a never falls."""
        primary = Particle(m=1.0)
        p = Particle(0.0, *state, min_a=1.0, max_a=1.0)
        sim = make_sim(primary, p)
        rng = np.random.default_rng(1234)
        prev_min, prev_max = p.min_a, p.max_a
        for _ in range(50):
            p.velocity = p.velocity * rng.uniform(0.9, 1.1)
            apply_tracking(sim)
            assert p.min_a <= prev_min
            assert p.max_a >= prev_max
            prev_min, prev_max = p.min_a, p.max_a


class TestExclusions:
    """Primary and variational particles are never modified."""

    def test_primary_never_tracked(self):
        """Bounds on particle 0 are ignored."""
        sim = make_sim(Particle(m=1.0, min_a=5.0, max_a=5.0),
                       Particle(x=1.0, vy=1.0, min_a=1.0, max_a=1.0))
        apply_tracking(sim)
        assert sim[0].min_a == 5.0
        assert sim[0].max_a == 5.0

    def test_variational_particles_never_tracked(self):
        """Bounds on trailing variational particles are ignored."""
        sim = make_sim(Particle(m=1.0), Particle(x=1.0, vy=1.0))
        var = sim.add_variation(2)
        for v in var:
            v.state = [2.0, 0.0, 0.0, 0.0, 0.5, 0.0]
            v.min_a = 10.0
            v.max_a = 10.0
        apply_tracking(sim)
        for v in var:
            assert v.min_a == 10.0
            assert v.max_a == 10.0

    def test_real_particle_before_variational_block_tracked(self):
        """The last real particle is still tracked when N_var > 0."""
        sim = make_sim(Particle(m=1.0))
        sim.add_variation()
        sim.add(x=1.0, vy=1.0, min_a=3.0, max_a=3.0)
        assert sim.N_real == 2
        apply_tracking(sim)
        assert sim[1].min_a == 1.0


class TestDegenerateOrbits:
    """Failed orbit computations leave the bounds bit-identical."""

    @pytest.mark.parametrize("primary, particle", [
        # coincident with primary
        (Particle(m=1.0), Particle(x=0.0, vy=1.0)),
        # at rest relative to primary
        (Particle(m=1.0, vx=0.3), Particle(x=1.0, vx=0.3)),
        # massless primary
        (Particle(m=0.0), Particle(x=1.0, vy=1.0)),
        # parabolic: v^2 == 2 mu / d
        (Particle(m=1.0), Particle(x=2.0, vy=1.0)),
    ])
    def test_bounds_unchanged(self, primary, particle):
        """Degenerate configurations are skipped silently."""
        particle.min_a = 0.123456789
        particle.max_a = 0.123456789
        sim = make_sim(primary, particle)
        apply_tracking(sim)
        assert sim[1].min_a == 0.123456789
        assert sim[1].max_a == 0.123456789

    def test_no_warning_emitted(self, recwarn):
        """Skipping a degenerate orbit does not warn."""
        sim = make_sim(Particle(m=1.0),
                       Particle(x=0.0, vy=1.0, min_a=1.0, max_a=1.0))
        apply_tracking(sim)
        assert len(recwarn) == 0


class TestEntryPoints:
    """Explicit-argument function and registered callback agree."""

    def test_callback_ignores_dt(self):
        """dt is accepted but has no effect on the result."""
        sims = [make_sim(Particle(m=1.0),
                         Particle(x=2.0, vy=0.6, min_a=5.0, max_a=0.0))
                for _ in range(2)]
        op = sims[0].extras.load_operator("track_minmax_a")
        track_minmax_a(sims[0], op, 0.0)
        track_minmax_a(sims[1], op, 1.0e6)
        assert sims[0][1].min_a == sims[1][1].min_a
        assert sims[0][1].max_a == sims[1][1].max_a

    def test_update_minmax_a_on_plain_list(self):
        """update_minmax_a works on any particle sequence."""
        particles = [Particle(m=1.0),
                     Particle(x=1.0, vy=1.0, min_a=2.0, max_a=2.0)]
        update_minmax_a(particles, G=1.0)
        assert particles[1].min_a == 1.0
        assert particles[1].max_a == 2.0

    def test_update_minmax_a_custom_primary(self):
        """A non-zero primary index is excluded and used as reference."""
        particles = [Particle(x=1.0, vy=1.0, min_a=2.0, max_a=2.0),
                     Particle(m=1.0, min_a=7.0, max_a=7.0)]
        update_minmax_a(particles, G=1.0, primary_index=1)
        assert particles[0].min_a == 1.0
        assert particles[1].min_a == 7.0

    def test_update_minmax_a_respects_n_var(self):
        """Trailing n_var particles are skipped."""
        particles = [Particle(m=1.0),
                     Particle(x=1.0, vy=1.0, min_a=2.0, max_a=2.0)]
        update_minmax_a(particles, G=1.0, n_var=1)
        assert particles[1].min_a == 2.0

    def test_operator_keeps_no_state(self):
        """Repeated calls on an unchanged state are idempotent."""
        sim = make_sim(Particle(m=1.0),
                       Particle(x=1.3, vy=0.7, min_a=5.0, max_a=0.0))
        apply_tracking(sim)
        first = (sim[1].min_a, sim[1].max_a)
        apply_tracking(sim)
        assert (sim[1].min_a, sim[1].max_a) == first

    def test_state_not_modified(self):
        """Tracking never moves particles."""
        sim = make_sim(Particle(m=1.0),
                       Particle(x=1.3, vy=0.7, min_a=5.0, max_a=0.0))
        before = [p.state for p in sim.particles]
        apply_tracking(sim)
        for p, state in zip(sim.particles, before):
            np.testing.assert_array_equal(p.state, state)
