"""Scene Registry Package.

Append-only registry of materials and primitives, the fixed-stride
serialization of the registry into the static GPU block, entity count
integration with the rendering program, and preset scenes.
"""
