"""
Global Configuration for Epikyklos Package
==========================================

This module provides package-wide configuration settings that users can modify
to control numerical thresholds, validation behavior, integrator settings and
default plotting options.

Examples
--------
View current configuration:

>>> import epikyklos
>>> print(epikyklos.config)

Modify settings:

>>> epikyklos.config.DEFAULT_DT = 1e-2     # Larger default step
>>> epikyklos.config.VERBOSE = False       # Silence compilation messages

Reset to defaults:

>>> epikyklos.config.reset()

Temporarily modify settings:

>>> with epikyklos.temp_config(STRICT_VALIDATION=False):
...     # Validation failures only warn inside this block
...     sim = epikyklos.Simulation(G=-1.0)

Notes
-----
These settings affect package-wide behavior. Modifying them will impact
all subsequent operations until changed again or reset.
"""

from dataclasses import dataclass
from contextlib import contextmanager
from typing import Optional


@dataclass
class EpikyklosConfig:
    """
    Global configuration for Epikyklos package.
    
    Attributes
    ----------
    TINY : float
        Magnitudes at or below this value are treated as zero when deciding
        whether an orbit is defined (primary mass, separation, speed).
        Default: 1e-308
    STRICT_VALIDATION : bool
        If True, validation failures raise exceptions.
        If False, validation failures issue warnings.
        Default: True
    VERBOSE : bool
        If True, print a message when a Heyoka integrator is compiled.
        Default: True
    INTEGRATION_TOL : float or None
        Tolerance passed to the Heyoka Taylor integrator.
        None uses Heyoka's default (machine epsilon).
        Default: None
    DEFAULT_DT : float
        Step size used by Simulation when none is given.
        Default: 1e-3
    INSTANCE_WARNING_THRESHOLD : int
        Number of compiled Simulation integrators in memory before a
        warning is issued.
        Default: 10
    DEFAULT_PLOT_POINTS : int
        Maximum number of samples drawn per trace by History.plot().
        Default: 1000
    DEFAULT_TRACE_COLOR : str
        Color of the semi-major axis trace in plots.
        Default: 'red'
    DEFAULT_RANGE_COLOR : str
        Color of the min/max envelope in plots.
        Default: 'lightblue'
    """
    
    # Degenerate orbit threshold
    TINY: float = 1e-308
    
    # Validation behavior
    STRICT_VALIDATION: bool = True
    VERBOSE: bool = True
    
    # Integration defaults
    INTEGRATION_TOL: Optional[float] = None
    DEFAULT_DT: float = 1e-3
    INSTANCE_WARNING_THRESHOLD: int = 10
    
    # Plotting defaults
    DEFAULT_PLOT_POINTS: int = 1000
    DEFAULT_TRACE_COLOR: str = 'red'
    DEFAULT_RANGE_COLOR: str = 'lightblue'
    
    def reset(self):
        """
        Reset all configuration values to package defaults.
        
        Examples
        --------
        >>> import epikyklos
        >>> epikyklos.config.DEFAULT_DT = 0.5  # Modify
        >>> epikyklos.config.reset()  # Back to defaults
        >>> epikyklos.config.DEFAULT_DT
        0.001
        """
        defaults = EpikyklosConfig()
        for key in self.__dataclass_fields__:
            setattr(self, key, getattr(defaults, key))
    
    def __repr__(self):
        """Return formatted string showing all configuration values."""
        lines = ["EpikyklosConfig:"]
        lines.append("  Thresholds:")
        lines.append(f"    TINY = {self.TINY}")
        lines.append("  Integration:")
        lines.append(f"    INTEGRATION_TOL = {self.INTEGRATION_TOL}")
        lines.append(f"    DEFAULT_DT = {self.DEFAULT_DT}")
        lines.append(f"    INSTANCE_WARNING_THRESHOLD = {self.INSTANCE_WARNING_THRESHOLD}")
        lines.append("  Behavior:")
        lines.append(f"    STRICT_VALIDATION = {self.STRICT_VALIDATION}")
        lines.append(f"    VERBOSE = {self.VERBOSE}")
        lines.append("  Plotting:")
        lines.append(f"    DEFAULT_PLOT_POINTS = {self.DEFAULT_PLOT_POINTS}")
        lines.append(f"    DEFAULT_TRACE_COLOR = '{self.DEFAULT_TRACE_COLOR}'")
        lines.append(f"    DEFAULT_RANGE_COLOR = '{self.DEFAULT_RANGE_COLOR}'")
        return "\n".join(lines)


# Global configuration instance
config = EpikyklosConfig()


@contextmanager
def temp_config(**kwargs):
    """
    Context manager for temporarily modifying configuration values.
    
    Configuration is automatically restored when the context exits,
    even if an exception occurs.
    
    Parameters
    ----------
    **kwargs
        Configuration attributes to temporarily modify.
    
    Examples
    --------
    >>> import epikyklos
    >>> with epikyklos.temp_config(VERBOSE=False, DEFAULT_DT=0.01):
    ...     sim = epikyklos.Simulation()
    >>> # Original config restored here
    >>> epikyklos.config.DEFAULT_DT
    0.001
    
    Raises
    ------
    AttributeError
        If an invalid configuration attribute is specified.
    """
    old_values = {}
    for key, value in kwargs.items():
        if not hasattr(config, key):
            raise AttributeError(
                f"EpikyklosConfig has no attribute '{key}'. "
                f"Valid attributes: {list(config.__dataclass_fields__.keys())}"
            )
        old_values[key] = getattr(config, key)
        setattr(config, key, value)
    
    try:
        yield config
    finally:
        for key, value in old_values.items():
            setattr(config, key, value)
