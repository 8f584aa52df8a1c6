"""Simulation core: column model, discretisation, fronts, energy and engine.

The sub-modules are kept free of packing and rendering concerns so that the
numerical stages can be tested on their own.
"""
