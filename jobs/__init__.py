"""
Background jobs.

Dramatiq actors that run commission cycles and bonus allocation.
"""
