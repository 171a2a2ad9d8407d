"""Infrastructure layer for the vocal practice platform.

Modules:
    metrics     Prometheus metrics registry and recording helpers.
"""
