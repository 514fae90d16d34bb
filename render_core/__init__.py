"""Render Core Package.

Configuration, vector/basis math, GPU record layout, geometric primitives,
triangle meshes and the orbit camera.
"""
