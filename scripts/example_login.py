#!/usr/bin/env python3
"""
Login Example Script

Demonstrates the session lifecycle against a real server.

Usage:
    IOTAPPS_USERNAME=... IOTAPPS_PASSWORD=... IOTAPPS_LOCATION_ID=... \
        python scripts/example_login.py

This script:
1. Restores a persisted API key, or logs in with username/password
2. Prints the key expiry and when the refresh is scheduled
3. Fetches the first page of narratives for a location
4. Logs out locally (add --global to revoke the key on the server)
"""

import asyncio
import logging
import os
import sys

# Add project root to path
sys.path.insert(0, ".")

from iotapps import AuthEvent, create_client_from_env

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def log_event(event: AuthEvent) -> None:
    logger.info(f"Auth event: {event.event_type.value} (reason={event.reason})")


async def main() -> int:
    client = await create_client_from_env()
    async with client:
        client.auth.on_login.connect(log_event)
        client.auth.on_logout.connect(log_event)
        client.auth.on_need_relogin.connect(log_event)

        if not client.auth.is_authenticated():
            username = os.getenv("IOTAPPS_USERNAME")
            password = os.getenv("IOTAPPS_PASSWORD")
            if not username or not password:
                logger.error("Set IOTAPPS_USERNAME and IOTAPPS_PASSWORD")
                return 1
            await client.auth.login(username, password)

        logger.info(f"Key expires at: {client.auth.api_key_expire}")
        logger.info(f"Refresh due in: {client.auth.refresh_due_in}s")

        location_id = os.getenv("IOTAPPS_LOCATION_ID")
        if location_id:
            response = await client.api.locations.get_narratives(int(location_id), row_count=10)
            for narrative in response.narratives:
                logger.info(f"[{narrative.narrative_date}] {narrative.title}")

        if "--global" in sys.argv:
            await client.auth.logout_global()
        else:
            await client.auth.logout_local()

    logger.info("✓ Done")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
