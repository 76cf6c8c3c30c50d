"""
Fastmatcher: OSM element to GeoJSON feature matching.

Proposes one feature per OSM element within a distance radius, lets an
operator accept or reject the proposals, and exports the accepted ones as
an OsmChange file.
"""

from importlib.metadata import version

__version__ = version("fastmatcher")

__all__ = ["__version__"]
