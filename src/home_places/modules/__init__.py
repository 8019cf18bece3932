"""
Modules package for home-places.

Modules are plug-ins that react to host events.
"""

from home_places.modules.base import AdapterModule

__all__ = ["AdapterModule"]
