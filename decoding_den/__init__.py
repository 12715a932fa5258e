"""
Decoding Den Audio
==================
Procedural sound effects untuk Decoding Den.
"""

__version__ = "1.0.0"
