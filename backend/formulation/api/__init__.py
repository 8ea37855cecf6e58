"""
API routes package.

Exports all API routers for easy inclusion in the main application.
"""
from formulation.api import samples, coefficients, simulation, recommendation, history

__all__ = [
    "samples",
    "coefficients",
    "simulation",
    "recommendation",
    "history"
]
