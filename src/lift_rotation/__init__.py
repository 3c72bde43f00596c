"""lift-rotation: rotating workout plan tracker with progressive overload."""

__version__ = "0.1.0"
