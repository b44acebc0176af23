"""
Core sanitization layer.

Everything here is independent of the transport: classification, secret
detection, structural sanitizers, body policy and the configuration models
that drive them.
"""
