"""
Utility functions and classes for the Epikyklos package.
"""

from time import perf_counter
import warnings
from typing import Type
from .config import config

class Timer:
    """
    Context manager for timing code execution.
    
    Examples
    --------
    >>> from epikyklos.utils import Timer
    >>> with Timer("Integration"):
    ...     sim.integrate(100.0)
    Integration: 0.123456 s
    
    >>> with Timer(verbose=False) as t:
    ...     sim.step()
    >>> print(f"Took {t.elapsed:.6f} seconds")
    """
    def __init__(self, name="Operation", verbose=True):
        """
        Parameters
        ----------
        name : str, optional
            Name to display when timing completes (default: "Operation")
        verbose : bool, optional
            Whether to print timing automatically (default: True)
        """
        self.name = name
        self.verbose = verbose
        self.elapsed = None
    
    def __enter__(self):
        self.start = perf_counter()
        return self
    
    def __exit__(self, *args):
        self.end = perf_counter()
        self.elapsed = self.end - self.start
        if self.verbose:
            print(f"{self.name}: {self.elapsed:.6f} s")
    
def validation_error(message: str, error_class: Type[Exception] = ValueError):
    """
    Raise error or warn based on config.STRICT_VALIDATION.
    
    When STRICT_VALIDATION is True (default), raises the specified exception.
    When False, issues a UserWarning instead and execution continues.
    
    Parameters
    ----------
    message : str
        Validation error message
    error_class : Type[Exception], optional
        Exception class to raise if STRICT_VALIDATION is True.
        Default: ValueError
    
    Raises
    ------
    Exception (of type error_class)
        If config.STRICT_VALIDATION is True
    
    Warns
    -----
    UserWarning
        If config.STRICT_VALIDATION is False
    
    Examples
    --------
    >>> from epikyklos.utils import validation_error
    >>> from epikyklos import config
    >>> validation_error("Step size must be positive")  # Raises ValueError
    >>> config.STRICT_VALIDATION = False
    >>> validation_error("Step size must be positive")  # Issues warning
    """
    if config.STRICT_VALIDATION:
        raise error_class(message)
    else:
        warnings.warn(message, UserWarning, stacklevel=2)
