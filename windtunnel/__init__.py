"""
Lattice Boltzmann wind tunnel: D2Q9 BGK flow around an embedded obstacle.
"""

from .fluid import Fluid
from .tracers import Tracer, StreamLine, sample_velocity, trace_streamline
from .boundary import fill_outline

__all__ = [
    "Fluid",
    "Tracer",
    "StreamLine",
    "sample_velocity",
    "trace_streamline",
    "fill_outline",
]
