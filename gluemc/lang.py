"""Localization source for death message templates."""

from typing import Optional

import aiofiles
import httpx

from .config import LangSettings, settings
from .logger import logger
from .parsing.death import DeathTemplate, build_death_templates
from .parsing.table import DeathTemplateTable, death_templates


async def fetch_lang_lines(
    lang: LangSettings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> list[str]:
    """Read the ``en_us.json`` localization file as lines.

    Uses the local file when configured, otherwise downloads it for the
    configured game version.

    Raises:
        httpx.HTTPError: If the download fails
        OSError: If the local file cannot be read
    """
    if lang.file is not None:
        logger.info(f"Reading localization from {lang.file}")
        async with aiofiles.open(lang.file, "r", encoding="utf-8") as f:
            text = await f.read()
        return text.splitlines()

    logger.info(f"Downloading localization from {lang.url}")
    async with httpx.AsyncClient(timeout=lang.timeout, transport=transport) as client:
        response = await client.get(lang.url)
        response.raise_for_status()
    return response.text.splitlines()


async def install_death_templates(
    lang: LangSettings = settings.localization,
    table: DeathTemplateTable = death_templates,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> tuple[DeathTemplate, ...]:
    """Fetch the localization, build the death templates and install them."""
    lines = await fetch_lang_lines(lang, transport=transport)
    return table.install(build_death_templates(lines))
