"""Photobox: frame templates with a photo slot and a webcam compositor.

The package is split by feature: ``geometry`` describes the slot, ``editor``
produces it, ``compositor`` and ``preview`` consume it, ``capture`` drives the
booth flow and ``templates`` is the registry that stores everything.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
