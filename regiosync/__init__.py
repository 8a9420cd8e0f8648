"""
RegioSync
Ingestion und Synchronisation von Klubdaten aus RegioWyniki.pl
"""

__version__ = "1.0.0"
__author__ = "Small Club Manager Team"

# NOTE:
# Avoid importing heavy modules (like configuration) at package import time to
# keep "import regiosync" lightweight and side-effect free, particularly for unit
# tests that only need the parsing helpers.

__all__ = []
