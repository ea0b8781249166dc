# fabexport/__init__.py
"""
FaB Stats exporter for GEM match history.

Scrapes the logged-in player's GEM history, normalizes events and matches,
and hands them to the FaB Stats importer.
"""

from fabexport.config import AGENT_VERSION

__version__ = AGENT_VERSION
