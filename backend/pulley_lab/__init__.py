"""Pulley Lab backend: rig editing and Atwood-machine simulation."""

__version__ = "0.1.0"
