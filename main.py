"""
RegioSync - Hauptanwendung

Zentraler Einstiegspunkt für den Sync-Dienst: startet den wiederkehrenden
Abgleich aller registrierten Vereine mit RegioWyniki.pl und läuft bis
SIGINT/SIGTERM.
"""

import asyncio
import logging
import sys

# Windows-specific asyncio policy to avoid 'Event loop is closed' and transport warnings
if sys.platform.startswith("win"):
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

from regiosync.apps.sync_app import ClubSyncApp
from regiosync.common.logging_utils import configure_logging
from regiosync.core.config import Settings


async def main():
    """Haupteinstiegspunkt"""
    try:
        settings = Settings()
        configure_logging("regiosync", level=settings.log_level, log_format=settings.log_format)

        app = ClubSyncApp(settings)
        await app.run_service()

    except KeyboardInterrupt:
        print("\nShutdown requested by user")
    except Exception as e:
        logging.error(f"RegioSync service failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
