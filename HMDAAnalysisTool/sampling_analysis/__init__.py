"""Sampling theory demonstrations: CLT simulation and sampling design comparison."""

from .clt_simulation import CLTSimulation, simulate_sample_means
from .sampling_designs import SamplingDesigns, systematic_indices

__all__ = [
    'CLTSimulation',
    'simulate_sample_means',
    'SamplingDesigns',
    'systematic_indices'
]
