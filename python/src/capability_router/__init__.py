"""
Capability Router Service

A small service for registering external capability servers, indexing them by the
capabilities they advertise, health-checking them, and routing capability
invocations to a live provider over HTTP.
"""

__version__ = "1.0.0"
