"""Map loading, collision, movement, animation and model-header reading for FPS game data."""

__version__ = "0.1.0"