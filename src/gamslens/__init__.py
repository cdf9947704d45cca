"""gamslens package root."""

from gamslens.exceptions import NeverRaise, NeverThrown
from gamslens.invariants import never

__all__ = ["__version__", "NeverRaise", "NeverThrown", "never"]

__version__ = "0.3.0"
