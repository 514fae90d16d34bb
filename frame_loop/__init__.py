"""Frame Loop Package.

Progressive frame counters and the sequential per-frame driver that hands
serialized buffers to the rendering program host.
"""
