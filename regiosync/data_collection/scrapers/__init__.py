"""
Data Collection Scrapers Package

Import concrete scrapers from their modules directly, e.g.:

    from regiosync.data_collection.scrapers.regiowyniki_scraper import RegioWynikiScraper
"""

__all__ = []
