"""
Core algorithms package for formulation modeling.

This package provides:
- Multivariate linear regression of smoke yields
- Forward prediction with baseline ratio scaling
- Grid-search recommendation of design parameters
- Field remapping between storage records and numeric vectors
"""

from . import errors
from . import params
from . import regression
from . import prediction
from . import recommendation

__all__ = [
    'errors',
    'params',
    'regression',
    'prediction',
    'recommendation',
]
