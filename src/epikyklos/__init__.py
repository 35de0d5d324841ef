"""
Epikyklos: Extensible Effects for N-body Simulations

A Python package for attaching per-step operators (physical effects and
bookkeeping such as semi-major axis range tracking) to a gravitational
N-body simulation integrated with Heyoka.
"""

# Core classes
from .particle import Particle
from .simulation import Simulation
from .history import History
from .orbital_elements import (
    OrbitalElements, OrbitalElements as OE, OEType,
    Orbit, OrbitError, orbit_from_particle, particle_from_orbit,
)

# Operator framework (importing .operators registers the built-ins)
from .extras import (
    Extras, Operator, OperatorTiming, register_operator, available_operators,
)
from . import operators
from .operators import update_minmax_a

# Configuration
from .config import config, temp_config

# Package metadata
__version__ = "0.1.0"

# Define what gets imported with "from epikyklos import *"
__all__ = [
    # Classes
    "Particle",
    "Simulation",
    "History",
    "OrbitalElements",
    "Orbit",
    "Extras",
    "Operator",
    # Abbreviations
    "OE",
    # Enums and errors
    "OEType",
    "OperatorTiming",
    "OrbitError",
    # Functions
    "orbit_from_particle",
    "particle_from_orbit",
    "register_operator",
    "available_operators",
    "update_minmax_a",
    # Configuration
    "config",
    "temp_config",
]
