"""Planetary Body & Station Package.

Body axis/equator frames, surface stations placed by spherical angles,
and the inter-station link heuristic.
"""
