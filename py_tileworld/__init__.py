"""
Procedural tile terrain with seamless heightmap stitching.
"""

__version__ = "0.1.0"
