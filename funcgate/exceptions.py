"""
Custom exceptions for the gateway core.

Startup errors (registry, configuration) are fatal and must stop the
process before it serves; HandlerFault is the only error expected to
cross a request boundary and the fault interceptor absorbs it.
"""


class GatewayError(Exception):
    """Base exception for all gateway errors"""
    pass


class HandlerFault(GatewayError):
    """Fault raised by a request handler or downstream middleware"""
    pass


class MiddlewareContractError(GatewayError):
    """A middleware broke the call-next-at-most-once contract"""
    pass


class RegistryError(GatewayError):
    """Error in the operation descriptor registry"""
    pass


class RegistryFrozenError(RegistryError):
    """Registration attempted after the registry was frozen"""
    pass


class DuplicateOperationError(RegistryError):
    """Handler or operation id registered twice"""
    pass


class ConfigurationConflictError(GatewayError):
    """Contradictory configuration flags"""
    pass
