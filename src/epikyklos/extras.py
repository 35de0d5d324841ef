'''Operator registry and per-step scheduling for Epikyklos simulations'''

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple, TYPE_CHECKING
from .utils import validation_error

if TYPE_CHECKING:
    from .simulation import Simulation

# define when an operator runs relative to the integration step
class OperatorTiming(Enum):
    PRE = 'pre'     # before the integrator advances the particles
    POST = 'post'   # after the integrator advances the particles


OperatorFunc = Callable[["Simulation", "Operator", float], None]

# name -> callback, populated by register_operator()
_REGISTRY: Dict[str, OperatorFunc] = {}


@dataclass
class Operator:
    """
    A named per-step callback.

    Attributes
    ----------
    name : str
        Registry name of the operator
    func : callable
        ``func(sim, operator, dt)``, called once per step
    timing : OperatorTiming
        Whether the operator runs before or after the integration step
    """
    name: str
    func: OperatorFunc
    timing: OperatorTiming = OperatorTiming.POST

    def __call__(self, sim: "Simulation", dt: float) -> None:
        self.func(sim, self, dt)


def register_operator(name: str, func: Optional[OperatorFunc] = None):
    """
    Register an operator callback under ``name``.

    Can be used directly or as a decorator:

    >>> @register_operator("my_effect")
    ... def my_effect(sim, operator, dt):
    ...     ...

    Raises
    ------
    ValueError
        If ``name`` is already registered
    """
    def decorator(f: OperatorFunc) -> OperatorFunc:
        if name in _REGISTRY:
            raise ValueError(f"Operator '{name}' is already registered")
        _REGISTRY[name] = f
        return f

    if func is None:
        return decorator
    return decorator(func)


def available_operators() -> List[str]:
    """Sorted names of all registered operators."""
    return sorted(_REGISTRY)


def _parse_timing(timing) -> OperatorTiming:
    """Convert string or enum to OperatorTiming enum"""
    if isinstance(timing, OperatorTiming):
        return timing
    elif isinstance(timing, str):
        try:
            return OperatorTiming(timing.lower())
        except ValueError:
            raise ValueError(f"Unknown operator timing '{timing}'. "
                             f"Use: {[t.value for t in OperatorTiming]}") from None
    else:
        raise TypeError(f"timing must be OperatorTiming or str, got {type(timing)}")


@dataclass
class Extras:
    """
    Operators attached to a Simulation.

    Operators are applied in insertion order within each timing slot.
    Created lazily by ``Simulation.extras``.
    """
    sim: "Simulation"
    _operators: List[Operator] = field(default_factory=list)

    @property
    def operators(self) -> Tuple[Operator, ...]:
        """Attached operators in application order"""
        return tuple(self._operators)

    def load_operator(self, name: str, timing="post") -> Operator:
        """
        Create an Operator for a registered callback (not yet attached).

        Raises
        ------
        ValueError
            If no operator is registered under ``name``
        """
        if name not in _REGISTRY:
            raise ValueError(f"Unknown operator '{name}'. "
                             f"Available: {available_operators()}")
        return Operator(name, _REGISTRY[name], _parse_timing(timing))

    def add_operator(self, operator, timing=None) -> Operator:
        """
        Attach an operator to the simulation.

        Parameters
        ----------
        operator : Operator or str
            Operator instance, or registry name to load
        timing : OperatorTiming or str, optional
            Override the operator's timing

        Returns
        -------
        Operator
            The attached operator

        Raises
        ------
        ValueError
            If an operator with the same name is already attached
        """
        if isinstance(operator, str):
            operator = self.load_operator(operator)
        elif not isinstance(operator, Operator):
            raise TypeError(f"operator must be Operator or str, got {type(operator)}")
        if any(op.name == operator.name for op in self._operators):
            # a rejected duplicate leaves the attached operator as it was
            validation_error(f"Operator '{operator.name}' is already attached")
            return operator
        if timing is not None:
            operator.timing = _parse_timing(timing)
        self._operators.append(operator)
        return operator

    def remove_operator(self, name: str) -> Operator:
        """Detach and return the operator called ``name``."""
        for k, op in enumerate(self._operators):
            if op.name == name:
                return self._operators.pop(k)
        raise ValueError(f"No operator named '{name}' is attached")

    def apply(self, timing, dt: float) -> None:
        """Run every attached operator with the given timing."""
        timing = _parse_timing(timing)
        for op in self._operators:
            if op.timing == timing:
                op(self.sim, dt)

    def __repr__(self):
        names = [f"{op.name}({op.timing.value})" for op in self._operators]
        return f"Extras(operators=[{', '.join(names)}])"
