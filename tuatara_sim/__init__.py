# tuatara_sim/__init__.py
"""
Tuatara machine simulator: an interpreter for deterministic finite-state
acceptors and hierarchical Turing machines.
"""

from .utils.config import APP_VERSION as __version__

__all__ = ["__version__"]
