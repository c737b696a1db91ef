"""
Request handlers exposed by the gateway.
"""

from .pets import FUNCTION_ROUTE, UPDATE_PET, build_registry, make_update_pet

__all__ = [
    'FUNCTION_ROUTE',
    'UPDATE_PET',
    'build_registry',
    'make_update_pet',
]
