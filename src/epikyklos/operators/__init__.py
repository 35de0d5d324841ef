"""
Built-in operators. Importing this package registers them by name.
"""

from .track_minmax_a import track_minmax_a, update_minmax_a
from .modify_orbits_direct import modify_orbits_direct
from .track_min_distance import track_min_distance

__all__ = [
    "track_minmax_a",
    "update_minmax_a",
    "modify_orbits_direct",
    "track_min_distance",
]
