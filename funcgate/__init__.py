"""
Function gateway: a single HTTP endpoint behind a middleware chain,
with environment-gated OpenAPI documentation.
"""

__version__ = "1.0.0"
