'''Orbital element computations for the Epikyklos N-body effects package
OrbitalElements class definition and two-body orbit helpers for particles'''

import numpy as np
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING
from .config import config

if TYPE_CHECKING:
    from .particle import Particle

# define an enumerated list of element types
class OEType(Enum):
    CARTESIAN = 'cart'      # [x;y;z;vx;vy;vz]
    KEPLERIAN = 'kep'       # [a;e;i;Omega;w;nu]


class OrbitError(ValueError):
    """Raised when a two-body orbit is undefined for the given states."""


@dataclass(frozen=True)
class Orbit:
    """
    Osculating two-body orbit of a particle relative to a primary.

    Attributes
    ----------
    a : float
        Semi-major axis (negative for hyperbolic orbits)
    e : float
        Eccentricity
    i : float
        Inclination [rad]
    omega : float
        Longitude of ascending node (RAAN) [rad]
    w : float
        Argument of periapsis [rad]
    nu : float
        True anomaly in [0, 2pi) [rad]
    d : float
        Separation from the primary
    v : float
        Relative speed
    h : float
        Specific angular momentum magnitude
    P : float
        Orbital period (NaN for unbound orbits)

    Angles are NaN for radial orbits (h == 0), where the orbit plane is
    undefined but the semi-major axis is not.
    """
    a: float
    e: float
    i: float
    omega: float
    w: float
    nu: float
    d: float
    v: float
    h: float
    P: float


def orbit_from_particle(G: float, particle: "Particle", primary: "Particle") -> Orbit:
    """
    Compute the osculating orbit of ``particle`` around ``primary``.

    Uses mu = G*(m_primary + m_particle) and the relative Cartesian state.
    Angles follow Flores & Fantino, Advances in Space Research, v.75, pp.4910.

    Parameters
    ----------
    G : float
        Gravitational constant
    particle : Particle
        Orbiting particle
    primary : Particle
        Reference particle

    Returns
    -------
    Orbit

    Raises
    ------
    OrbitError
        If the primary has no mass, the particles coincide, the relative
        velocity vanishes, or the orbit is parabolic (infinite a).
    """
    tiny = config.TINY
    if primary.m <= tiny:
        raise OrbitError("Primary has no mass, orbit is undefined")
    mu = G * (primary.m + particle.m)

    rvec = particle.position - primary.position
    vvec = particle.velocity - primary.velocity
    d = float(np.linalg.norm(rvec))
    if d <= tiny:
        raise OrbitError("Particle coincides with primary, orbit is undefined")
    v = float(np.linalg.norm(vvec))
    if v <= tiny:
        raise OrbitError("Particle is at rest relative to primary, orbit is undefined")

    # find semimajor axis from energy equation
    denom = v**2 - 2 * mu / d
    if denom == 0:
        raise OrbitError("Parabolic orbit, semi-major axis is infinite")
    a = -mu / denom
    if not np.isfinite(a):
        raise OrbitError(f"Semi-major axis is not finite (a={a})")

    hvec = np.cross(rvec, vvec)
    h = float(np.linalg.norm(hvec))
    evec = np.cross(vvec, hvec) / mu - rvec / d
    e = float(np.linalg.norm(evec))

    if h > tiny:
        i = np.arctan2(np.sqrt(hvec[0]**2 + hvec[1]**2), hvec[2])
        omega = np.arctan2(hvec[0], -hvec[1])
        nhat = np.array([np.cos(omega), np.sin(omega), 0])
        bhat = np.cross(hvec / h, nhat)
        w = np.arctan2(np.dot(evec, bhat), np.dot(evec, nhat))
        nu = (np.arctan2(np.dot(rvec, bhat), np.dot(rvec, nhat)) - w) % (2 * np.pi)
    else:
        i = omega = w = nu = np.nan

    P = 2 * np.pi * np.sqrt(a**3 / mu) if a > 0 else np.nan
    return Orbit(a=float(a), e=e, i=float(i), omega=float(omega), w=float(w),
                 nu=float(nu), d=d, v=v, h=h, P=float(P))


def particle_from_orbit(G: float, primary: "Particle", m: float = 0.0,
                        a: float = 1.0, e: float = 0.0, i: float = 0.0,
                        omega: float = 0.0, w: float = 0.0, nu: float = 0.0,
                        **kwargs) -> "Particle":
    """
    Create a particle on a Keplerian orbit around ``primary``.

    Parameters
    ----------
    G : float
        Gravitational constant
    primary : Particle
        Reference particle; the new particle's state is offset by its state
    m : float, optional
        Mass of the new particle
    a, e, i, omega, w, nu : float, optional
        Keplerian elements (RAAN is ``omega``, argument of periapsis ``w``)
    **kwargs
        Extra Particle fields (name, min_a, max_a, ...)

    Returns
    -------
    Particle

    Raises
    ------
    ValueError
        If the elements are inconsistent or the primary has no mass.
    """
    from .particle import Particle

    if primary.m <= config.TINY and m <= config.TINY:
        raise ValueError("Cannot place a particle on an orbit around a massless primary")
    if e == 1:
        raise ValueError("Parabolic orbits (e=1) cannot be specified by semi-major axis")
    mu = G * (primary.m + m)
    oe = OrbitalElements([a, e, i, omega, w, nu], OEType.KEPLERIAN, mu=mu)
    state = oe.to_cartesian().elements + primary.state
    return Particle(m, *state, **kwargs)


#define basic orbital element class
class OrbitalElements:
    """
    Represents orbital elements as a set of six phase space invariants.
    Cartesian representations are relative to the primary body.
    OrbitalElements is immutable, extract elements using numpy methods and
    create a new instance to change.
    """
    # ========== CLASS CONSTANTS ==========
    # Tolerance for floating-point equality comparisons
    _EQUALITY_RTOL = 1e-12
    _EQUALITY_ATOL = 1e-14

    # Default gravitational parameter (G = 1, unit primary mass)
    DEFAULT_MU = 1.0

    # ========== CONSTRUCTION ==========
    def __init__(self, elements, element_type, validate=True, mu=None):
        """
        Create orbital elements from a 6-element array.

        OrbitalElements([1.0, 0.01, 0.5, 0, 0, 0], 'kep', mu=1.0)

        Parameters
        ----------
        elements : array-like
            6-element array of orbital elements
            Keplerian (a, e, i, omega, w, nu) or Cartesian (x, y, z, vx, vy, vz)
        element_type : OEType or str
            Type of elements ('cart', 'kep')
        validate : bool, optional
            Whether to validate elements (default True)
        mu : float, optional
            Gravitational parameter, defaults to DEFAULT_MU
        """
        self._mu = self.DEFAULT_MU if mu is None else mu
        self.elements = np.array(elements, dtype=float)
        self.element_type = self._parse_element_type(element_type)
        # Ensure immutability of elements array
        self.elements.flags.writeable = False
        if validate:
            self._validate()

    # ========== VALIDATION ==========
    def _validate(self):
        """Check if elements conform to their claimed type
        If validation fails inappropriately, set validate=False for constructor
        """
        if len(self.elements) != 6:
            raise ValueError("Orbital elements must be 6-element vector")
        if not np.all(np.isfinite(self.elements)):
            raise ValueError("Elements contain NaN or Inf")
        if self._mu <= 0:
            raise ValueError(f"Gravitational parameter must be positive, got {self._mu}")
        if self.element_type == OEType.KEPLERIAN:
            self._validate_keplerian()

    def _validate_keplerian(self):
        a, e, i, omega, w, nu = self.elements
        # Validate a-e combination for physical consistency
        if e < 1 and a <= 0:
            raise ValueError(f"Elliptic orbit (e={e}) "
                             f"requires positive semi-major axis, got a={a}")
        if e >= 1 and a >= 0:
            raise ValueError(f"Hyperbolic orbit (e={e}) "
                             f"requires negative semi-major axis, got a={a}")
        if e < 0:
            raise ValueError(f"Eccentricity must be non-negative, got {e}")
        if i > np.pi or i < 0:
            raise ValueError("Inclination out of range")

    # ========== ELEMENT TYPE CONVERSIONS ==========
    def convert_to(self, target_type):
        """
        Convert orbital elements to a different representation.

        Parameters
        ----------
        target_type : OEType or str
            The desired orbital element type ('cart' or 'kep')

        Returns
        -------
        OrbitalElements
            New OrbitalElements object with elements in target type
        """
        target_type = self._parse_element_type(target_type)

        if target_type == self.element_type:
            converted_elements = self.elements.copy()
        elif target_type == OEType.CARTESIAN:
            converted_elements = self._keplerian_to_cartesian()
        else:
            converted_elements = self._cartesian_to_keplerian()

        return OrbitalElements(converted_elements, target_type,
                               validate=False, mu=self._mu)

    def _keplerian_to_cartesian(self):
        """Convert Keplerian elements to Cartesian state vector."""
        a, e, i, omega, w, nu = self.elements
        # find semi-latus rectum
        p = a*(1 - e**2)
        # find position in perifocal frame
        r_mag = p / (1 + e*np.cos(nu))
        rvec = np.array([r_mag*np.cos(nu), r_mag*np.sin(nu), 0])
        # find velocity in perifocal frame
        vvec = np.array([-np.sqrt(self._mu/p) * np.sin(nu),
                         np.sqrt(self._mu/p) * (e + np.cos(nu)), 0])
        # rotation about z-axis by RAAN
        R3_omega = np.array([
            [np.cos(omega), -np.sin(omega), 0],
            [np.sin(omega),  np.cos(omega), 0],
            [0,              0,             1]
        ])
        # rotation about x-axis by inclination
        R1_i = np.array([
            [1,  0,          0         ],
            [0,  np.cos(i), -np.sin(i) ],
            [0,  np.sin(i),  np.cos(i) ]
        ])
        # rotation about z-axis by argument of periapsis
        R3_w = np.array([
            [np.cos(w), -np.sin(w), 0],
            [np.sin(w),  np.cos(w), 0],
            [0,          0,         1]
        ])
        DCM = R3_omega @ R1_i @ R3_w
        return np.concatenate([DCM @ rvec, DCM @ vvec])

    def _cartesian_to_keplerian(self):
        """Convert Cartesian state vector to Keplerian elements."""
        from .particle import Particle
        primary = Particle(m=self._mu)
        orbiter = Particle(0.0, *self.elements)
        o = orbit_from_particle(1.0, orbiter, primary)
        return np.array([o.a, o.e, o.i, o.omega, o.w, o.nu])

    def to_cartesian(self):
        """Shortcut for convert_to('cart')"""
        return self.convert_to(OEType.CARTESIAN)

    def to_keplerian(self):
        """Shortcut for convert_to('kep')"""
        return self.convert_to(OEType.KEPLERIAN)

    # ========== PROPERTY ACCESS ==========
    @property
    def mu(self):
        """Gravitational parameter"""
        return self._mu

    @property
    def a(self):
        """Semi-major axis (only for Keplerian elements)"""
        if self.element_type != OEType.KEPLERIAN:
            raise AttributeError(
                "Semi-major axis only available for Keplerian elements")
        return self.elements[0]

    @property
    def e(self):
        """Eccentricity (only for Keplerian elements)"""
        if self.element_type != OEType.KEPLERIAN:
            raise AttributeError(
                "Eccentricity only available for Keplerian elements")
        return self.elements[1]

    @property
    def position(self):
        """Position vector (only for Cartesian)"""
        if self.element_type != OEType.CARTESIAN:
            raise AttributeError(
                "Position only directly available for Cartesian elements")
        return self.elements[:3]

    @property
    def velocity(self):
        """Velocity vector (only for Cartesian)"""
        if self.element_type != OEType.CARTESIAN:
            raise AttributeError(
                "Velocity only directly available for Cartesian elements")
        return self.elements[3:]

    # ========== SPECIAL METHODS ==========
    def __repr__(self):
        return f"OrbitalElements({self.elements.tolist()}, {self.element_type})"

    def __eq__(self, other):
        #Check equality with tolerance
        if not isinstance(other, OrbitalElements):
            return False
        return (self.element_type == other.element_type and
                np.allclose(self.elements, other.elements,
                            rtol=self._EQUALITY_RTOL,
                            atol=self._EQUALITY_ATOL))

    __hash__ = None

    # ========== STATIC METHODS ==========
    @staticmethod
    def _parse_element_type(element_type):
        """Convert string or enum to OEType enum"""
        if isinstance(element_type, OEType):
            return element_type
        elif isinstance(element_type, str):
            type_map = {
                'cart': OEType.CARTESIAN,
                'cartesian' : OEType.CARTESIAN,
                'kep': OEType.KEPLERIAN,
                'kepler' : OEType.KEPLERIAN,
                'keplerian' : OEType.KEPLERIAN,
            }
            if element_type in type_map:
                return type_map[element_type]
            else:
                raise ValueError(f"Unknown element type '{element_type}'. "
                                 f"Use: {list(type_map.keys())}")
        else:
            raise TypeError(f"element_type must be OEType or str, "
                            f"got {type(element_type)}")
