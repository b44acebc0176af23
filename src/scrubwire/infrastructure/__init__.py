"""
Infrastructure layer.

Adapters between the sanitization core and the outside world; currently the
``requests`` transport integration.
"""
