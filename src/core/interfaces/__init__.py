"""Core contracts (Protocol).

Adapters implement these; the core only depends on the abstractions.
"""
