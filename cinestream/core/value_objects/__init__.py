"""
Objets valeur immutables.

Exports :
- RequestDescriptor : Description immutable d'un appel HTTP (URL, timeout, miroirs)
"""

from cinestream.core.value_objects.request import RequestDescriptor

__all__ = ["RequestDescriptor"]
