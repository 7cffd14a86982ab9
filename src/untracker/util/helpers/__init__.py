# Helper subpackage exports.
# Re-export helper functions so callers can do:
#   from untracker.util.helpers import atomic_json

from .atomic_json import atomic_json

__all__ = [
    "atomic_json",
]
