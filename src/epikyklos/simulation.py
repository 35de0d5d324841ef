'''Simulation class definition
Heyoka-backed N-body host that applies attached operators every step'''

import numpy as np
import warnings
from typing import List, Optional, TYPE_CHECKING
import heyoka as hy
from .config import config
from .extras import Extras, OperatorTiming
from .orbital_elements import particle_from_orbit
from .particle import Particle
from .utils import validation_error

if TYPE_CHECKING:
    from .history import History


class Simulation:
    """
    Gravitational N-body simulation with per-step operators.

    Particles are ordered: index 0 is the primary, real particles follow,
    and a trailing block of ``N_var`` variational particles is carried
    for sensitivity bookkeeping. Variational particles are not integrated
    and are skipped by the built-in operators.

    Each call to ``step()`` applies PRE operators, advances every real
    particle by ``dt`` with a Heyoka Taylor integrator, then applies POST
    operators.

    Parameters
    ----------
    G : float, optional
        Gravitational constant (default 1)
    dt : float, optional
        Step size (default config.DEFAULT_DT)
    compile : bool, optional
        Compile the integrator on the first ``add`` rather than lazily
        on the first step (default False)

    Notes
    -----
    - The integrator is compiled from ``heyoka.model.nbody`` and cached;
      adding particles or changing masses or G triggers recompilation
    - Instance counting: a warning is issued when more than
      config.INSTANCE_WARNING_THRESHOLD compiled integrators exist
    """
    # ========== CLASS CONSTANTS ==========
    _compiled_count = 0
    _ORBIT_KEYS = frozenset(("a", "e", "i", "omega", "w", "nu"))
    # Fraction of dt by which tmax may exceed a step boundary without an extra step
    _STEP_RTOL = 1e-9

    # ========== CONSTRUCTION ==========
    def __init__(self, G: float = 1.0, dt: Optional[float] = None,
                 compile: bool = False):
        if not np.isfinite(G) or G <= 0:
            validation_error(f"Gravitational constant must be positive, got {G}")
        self._G = float(G)
        self._dt = None
        self.dt = config.DEFAULT_DT if dt is None else dt
        if self._dt is None:
            self._dt = config.DEFAULT_DT
        self._t = 0.0
        self._particles: List[Particle] = []
        self._N_var = 0
        self._extras: Optional[Extras] = None
        self._compile_eagerly = compile

        # Cached heyoka integrator and the masses it was built for
        self._cached_integrator = None
        self._integrator_key = None

    # ========== PARTICLES ==========
    def add(self, particle: Optional[Particle] = None,
            primary: Optional[Particle] = None, **kwargs) -> Particle:
        """
        Add a real particle (inserted before any variational particles).

        Can be called in three ways:

        1. sim.add(Particle(m=1.0))
        2. sim.add(m=1e-3, x=1.0, vy=1.0)          Cartesian fields
        3. sim.add(m=1e-3, a=1.0, e=0.1, min_a=1.0, max_a=1.0)
           Orbital elements relative to ``primary`` (default particle 0)

        Returns
        -------
        Particle
            The added particle
        """
        if particle is not None:
            if kwargs:
                raise ValueError("Pass either a Particle or keyword fields, not both")
            if not isinstance(particle, Particle):
                raise TypeError(f"particle must be Particle, got {type(particle)}")
        elif self._ORBIT_KEYS & kwargs.keys():
            if primary is None:
                if not self.N_real:
                    raise ValueError(
                        "Cannot add a particle by orbital elements "
                        "without a primary, add a primary first")
                primary = self._particles[0]
            particle = particle_from_orbit(self._G, primary, **kwargs)
        else:
            particle = Particle(**kwargs)

        self._particles.insert(self.N_real, particle)
        self._invalidate_integrator()
        if self._compile_eagerly:
            self._compile_integrator()
        return particle

    def add_variation(self, count: int = 1) -> List[Particle]:
        """Append ``count`` variational particles to the trailing block."""
        if count < 1:
            raise ValueError(f"count must be at least 1, got {count}")
        added = [Particle() for _ in range(count)]
        self._particles.extend(added)
        self._N_var += count
        return added

    # ========== INTEGRATION ==========
    def step(self) -> None:
        """
        Advance the simulation by one step of size ``dt``.

        If integration fails, real particle states are restored to their
        values before the PRE operators ran and ``t`` is unchanged, so a
        retried step applies PRE effects only once. Non-state fields
        changed by PRE operators (e.g. tracked bounds) are kept.
        """
        dt = self._dt
        saved = [p.state for p in self._particles[:self.N_real]]
        try:
            if self._extras is not None:
                self._extras.apply(OperatorTiming.PRE, dt)
            self._advance(dt)
        except ValueError:
            for p, state in zip(self._particles, saved):
                p.state = state
            raise
        if self._extras is not None:
            self._extras.apply(OperatorTiming.POST, dt)

    def integrate(self, tmax: float, history: Optional["History"] = None) -> None:
        """
        Step until ``t`` reaches ``tmax``.

        Steps have the fixed size ``dt``; the final time is the first step
        boundary at or after ``tmax - _STEP_RTOL * dt``. A ``tmax`` within
        that round-off margin past a boundary ends on the boundary, so
        ``integrate(n * dt)`` takes exactly ``n`` steps.

        Parameters
        ----------
        tmax : float
            Target time
        history : History, optional
            Recorder updated after every step
        """
        tmax = float(tmax)
        if tmax < self._t:
            validation_error(
                f"Cannot integrate backwards from t={self._t} to tmax={tmax}")
            return
        n_steps = int(np.ceil((tmax - self._t) / self._dt - self._STEP_RTOL))
        for _ in range(n_steps):
            self.step()
            if history is not None:
                history.record(self)

    def _advance(self, dt: float) -> None:
        """Move real particles forward by dt with the Heyoka integrator."""
        real = self._particles[:self.N_real]
        t_end = self._t + dt
        if len(real) < 2:
            # nothing to attract, straight-line motion
            for p in real:
                p.position = p.position + dt * p.velocity
            self._t = t_end
            return

        self._compile_integrator()
        ta = self._cached_integrator
        assert ta is not None, "Integrator should be compiled"

        state_array = np.concatenate([p.state for p in real])
        ta.time = float(self._t)
        ta.state[:] = state_array
        outcome = ta.propagate_until(float(t_end))[0]

        if (outcome != hy.taylor_outcome.time_limit
                or not np.all(np.isfinite(ta.state))):
            raise ValueError(
                f"Integration failed: state became invalid during step.\n"
                f"Outcome: {outcome}\n"
                f"Time: {self._t} -> {t_end}\n"
                f"Initial state: {state_array}\n"
                f"Final state: {ta.state}\n"
                f"Likely causes:\n"
                f"  - Close encounter or collision between particles\n"
                f"  - Step size too large for the configuration"
            )
        for p, row in zip(real, ta.state.reshape((-1, 6))):
            p.state = row
        self._t = t_end

    # ========== INTEGRATOR CACHE ==========
    def _build_eom(self):
        """
        Build the symbolic N-body equations of motion.

        State vector order: [x_0, y_0, z_0, vx_0, vy_0, vz_0, x_1, ...]
        """
        masses = [p.m for p in self._particles[:self.N_real]]
        return hy.model.nbody(len(masses), masses=masses, Gconst=self._G)

    def _current_key(self):
        return (self._G, tuple(p.m for p in self._particles[:self.N_real]))

    def _compile_integrator(self):
        """
        Compile Heyoka integrator (expensive operation).

        Recompiles only if particles, masses or G changed since the last build.
        """
        key = self._current_key()
        if self._cached_integrator is not None and key == self._integrator_key:
            return
        self._invalidate_integrator()
        if len(key[1]) < 2:
            return

        sys = self._build_eom()
        kwargs = {}
        if config.INTEGRATION_TOL is not None:
            kwargs["tol"] = config.INTEGRATION_TOL
        if config.VERBOSE:
            print(f"Compiling {len(key[1])}-body integrator...")

        # EXPENSIVE: Compile integrator
        self._cached_integrator = hy.taylor_adaptive(
            sys=sys,
            state=[0.0] * (6 * len(key[1])),
            **kwargs
        )
        self._integrator_key = key
        if config.VERBOSE:
            print("Compilation complete")

        Simulation._compiled_count += 1
        if Simulation._compiled_count > config.INSTANCE_WARNING_THRESHOLD:
            warnings.warn(
                f"{Simulation._compiled_count} compiled Simulation integrators "
                f"are alive. Each one holds LLVM-compiled code, which can "
                f"consume significant memory. Consider reusing Simulations.",
                ResourceWarning,
                stacklevel=3
            )

    def _invalidate_integrator(self):
        if self._cached_integrator is not None:
            Simulation._compiled_count -= 1
        self._cached_integrator = None
        self._integrator_key = None

    def compile(self):
        """
        Explicitly compile the integrator if needed.

        Returns
        -------
        self
            Returns self for method chaining
        """
        self._compile_integrator()
        return self

    # ========== PROPERTY ACCESS ==========
    @property
    def G(self) -> float:
        """Gravitational constant"""
        return self._G

    @property
    def dt(self) -> float:
        """Step size"""
        return self._dt

    @dt.setter
    def dt(self, value: float):
        if not np.isfinite(value) or value <= 0:
            validation_error(f"Step size must be positive, got {value}")
            return
        self._dt = float(value)

    @property
    def t(self) -> float:
        """Current simulation time"""
        return self._t

    @property
    def particles(self) -> List[Particle]:
        """All particles, variational particles last (live list)"""
        return self._particles

    @property
    def N(self) -> int:
        """Total number of particles, variational included"""
        return len(self._particles)

    @property
    def N_var(self) -> int:
        """Number of trailing variational particles"""
        return self._N_var

    @property
    def N_real(self) -> int:
        """Number of real (non-variational) particles"""
        return len(self._particles) - self._N_var

    @property
    def extras(self) -> Extras:
        """Operator container, created on first access"""
        if self._extras is None:
            self._extras = Extras(self)
        return self._extras

    @property
    def is_compiled(self) -> bool:
        """True if a Heyoka integrator matching the current particles is cached"""
        return (self._cached_integrator is not None
                and self._integrator_key == self._current_key())

    # ========== SPECIAL METHODS ==========
    def __getitem__(self, index) -> Particle:
        return self._particles[index]

    def __len__(self) -> int:
        return len(self._particles)

    def __del__(self):
        """Release the instance count of a cached integrator."""
        if getattr(self, "_cached_integrator", None) is not None:
            Simulation._compiled_count -= 1

    def __repr__(self):
        parts = [f"Simulation(N={self.N}", f"N_var={self.N_var}",
                 f"G={self._G:.6g}", f"t={self._t:.6g}", f"dt={self._dt:.6g}"]
        if self._extras is not None and self._extras.operators:
            parts.append(f"operators={[op.name for op in self._extras.operators]}")
        return ", ".join(parts) + ")"
