"""
scribe: Wayland protocol XML to C++ wrapper generator.

Reads a Wayland protocol description and generates server- or client-side
C++ classes on top of the C marshalling code produced by wayland-scanner.
"""

GENERATOR_NAME = "wayland-scribe"
__version__ = "1.0.0"
