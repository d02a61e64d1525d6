"""ship: build, tag, publish and record a container image release."""

__version__ = "0.3.0"
