"""Allocation engine services.

Import from the submodules directly, e.g.
``from allocation_engine.services.engine import AllocationEngine``.
"""
