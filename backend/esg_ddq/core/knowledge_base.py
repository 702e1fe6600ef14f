# backend/esg_ddq/core/knowledge_base.py
"""Risk Management Framework (RMF) loader.

The framework text is inlined verbatim into every assessment prompt, so the
engines refuse to run without it. It is loaded once per process and held in a
write-once cell; concurrent first loads may both read the file and store
equal text.

Lookup order:
1. settings.rmf_path (explicit)
2. ./public/ESG_RMF.txt, ./ESG_RMF.txt (relative to the working directory)
3. esg_ddq/data/ESG_RMF.txt (package data)
4. GET {settings.rmf_base_url}/ESG_RMF.txt
"""
import asyncio
from importlib import resources
from pathlib import Path
from typing import List, Optional

import httpx

from esg_ddq.config import Settings, settings as default_settings
from esg_ddq.exceptions import KnowledgeBaseUnavailable
from esg_ddq.utils.logging import logger

PACKAGED_DATA_DIR = resources.files("esg_ddq") / "data"


class KnowledgeBaseLoader:
    """Single-initialization, read-only cell for the framework text."""

    def __init__(self, cfg: Optional[Settings] = None, locations: Optional[List[Path]] = None):
        self.settings = cfg or default_settings
        self.locations = locations if locations is not None else self._default_locations()
        self._cached: Optional[str] = None

    def _default_locations(self) -> List[Path]:
        filename = self.settings.rmf_filename
        paths = []
        if self.settings.rmf_path:
            paths.append(Path(self.settings.rmf_path))
        paths.extend([
            Path.cwd() / "public" / filename,
            Path.cwd() / filename,
            PACKAGED_DATA_DIR / filename,
        ])
        return paths

    @property
    def is_loaded(self) -> bool:
        return self._cached is not None

    async def load(self) -> str:
        """Return the framework text, reading it on first call only.

        Raises:
            KnowledgeBaseUnavailable: no local copy readable and the network fetch failed
        """
        if self._cached is not None:
            return self._cached

        text = await self._load_local()
        if text is None:
            text = await self._load_remote()
        if text is None:
            raise KnowledgeBaseUnavailable(
                f"{self.settings.rmf_filename} not found. Please ensure the file exists in the public "
                f"directory or configure RMF_PATH / RMF_BASE_URL.",
                locations=[str(p) for p in self.locations],
            )

        self._cached = text
        return text

    async def _load_local(self) -> Optional[str]:
        for path in self.locations:
            if not path.is_file():
                continue
            try:
                text = await self._read_file(path)
            except (OSError, UnicodeDecodeError) as e:
                logger.warning(
                    f"RMF file read failed, trying next location: {e}",
                    extra={"path": str(path)}
                )
                continue
            if not text.strip():
                logger.warning("RMF file is empty, trying next location", extra={"path": str(path)})
                continue
            logger.info(f"Loaded RMF from file ({len(text):,} characters)", extra={"path": str(path)})
            return text
        return None

    async def _read_file(self, path: Path) -> str:
        return await asyncio.to_thread(path.read_text, encoding="utf-8")

    async def _load_remote(self) -> Optional[str]:
        base_url = self.settings.rmf_base_url
        if not base_url:
            logger.warning("RMF not found locally and no RMF_BASE_URL configured")
            return None

        url = f"{base_url.rstrip('/')}/{self.settings.rmf_filename}"
        try:
            text = await self._fetch(url)
        except httpx.HTTPError as e:
            logger.error(f"RMF fetch failed: {e}", extra={"url": url})
            return None

        if not text.strip():
            logger.error("RMF fetched over network is empty", extra={"url": url})
            return None

        logger.info(f"Loaded RMF via fetch ({len(text):,} characters)", extra={"url": url})
        return text

    async def _fetch(self, url: str) -> str:
        async with httpx.AsyncClient(timeout=self.settings.rmf_fetch_timeout_seconds) as client:
            response = await client.get(url)
            response.raise_for_status()
            return response.text


_loader: Optional[KnowledgeBaseLoader] = None


def get_knowledge_base() -> KnowledgeBaseLoader:
    """Process-wide loader built from global settings."""
    global _loader
    if _loader is None:
        _loader = KnowledgeBaseLoader()
    return _loader
