"""Check PyPI for a newer release of lsbranch."""

from __future__ import annotations

import datetime
import importlib.metadata
import logging

import httpx
from packaging.version import InvalidVersion, Version

from . import config

logger = logging.getLogger(__name__)

PACKAGE_NAME = "lsbranch"
PYPI_URL = f"https://pypi.org/pypi/{PACKAGE_NAME}/json"
TIMEOUT_SECONDS = 1.0


def get_installed_version() -> Version:
    return Version(importlib.metadata.version(PACKAGE_NAME))


async def fetch_latest_version(client: httpx.AsyncClient) -> Version | None:
    """
    GET https://pypi.org/pypi/lsbranch/json

    Returns None if the latest version can't be determined.
    """
    try:
        response = await client.get(PYPI_URL, timeout=TIMEOUT_SECONDS)
        response.raise_for_status()
        data = response.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.debug("Failed to fetch %s: %s", PYPI_URL, e)
        return None

    try:
        return Version(data["info"]["version"])
    except (KeyError, TypeError, InvalidVersion):
        pass

    # Fall back to the greatest release
    versions = []
    for raw_version in data.get("releases", {}) if isinstance(data, dict) else []:
        try:
            versions.append(Version(raw_version))
        except InvalidVersion:
            logger.debug("Ignoring invalid version %s", raw_version)
    return max(versions, default=None)


async def get_update_message(
    config_store: config.ConfigStore,
    client: httpx.AsyncClient,
    now: datetime.datetime | None = None,
) -> str | None:
    """
    Return a message if a newer version is available.

    Checks at most once a day. The check time is only recorded when PyPI
    answered. Problems with the check return None rather than raising.
    """
    now = now or datetime.datetime.now(datetime.timezone.utc)
    if not config_store.should_check_for_updates(now):
        logger.info("Skipping update check")
        return None

    latest_version = await fetch_latest_version(client)
    if latest_version is None:
        return None

    try:
        config_store.set_last_update_check(now)
        installed_version = get_installed_version()
    except (OSError, importlib.metadata.PackageNotFoundError) as e:
        logger.debug("Update check failed: %s", e)
        return None

    logger.info(
        "Installed version %s, latest version %s", installed_version, latest_version
    )
    if latest_version <= installed_version:
        return None
    return (
        f"An update to {PACKAGE_NAME} is available. The latest version is {latest_version}. "
        f'Run "pip install --upgrade {PACKAGE_NAME}=={latest_version}" to update'
    )
