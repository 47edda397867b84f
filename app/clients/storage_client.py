from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple
from urllib.parse import quote

import httpx

from app.core.config import Settings, settings
from app.core.errors import StorageFetchError

logger = logging.getLogger(__name__)


class StorageClient:
    """Downloads stored documents, trying every configured bucket in order."""

    def __init__(
        self,
        config: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        cfg = config or settings
        self._base_url = (cfg.storage_url or "").strip().rstrip("/")
        self._buckets = cfg.storage_bucket_list
        self._client = httpx.AsyncClient(
            timeout=cfg.storage_timeout_sec,
            headers=self._headers(cfg.storage_api_key),
            transport=transport,
        )

    @property
    def enabled(self) -> bool:
        return bool(self._base_url and self._buckets)

    @property
    def buckets(self) -> List[str]:
        return list(self._buckets)

    async def close(self) -> None:
        await self._client.aclose()

    @staticmethod
    def _headers(api_key: Optional[str]) -> Dict[str, str]:
        key = (api_key or "").strip()
        if not key:
            return {}
        return {"apikey": key, "Authorization": f"Bearer {key}"}

    def _object_url(self, bucket: str, path: str) -> str:
        return f"{self._base_url}/storage/v1/object/{quote(bucket)}/{quote(path.lstrip('/'))}"

    async def download(self, bucket: str, path: str) -> Tuple[Optional[bytes], str]:
        try:
            response = await self._client.get(self._object_url(bucket, path))
        except httpx.HTTPError as exc:
            return None, f"{bucket}: {exc}"

        if not response.is_success:
            body = (response.text or "").strip().replace("\n", " ")
            return None, f"{bucket}: status {response.status_code}: {body[:200]}"
        return response.content, ""

    async def fetch(self, path: str) -> bytes:
        if not path:
            raise StorageFetchError("no storage path given")
        if not self.enabled:
            raise StorageFetchError("object storage is not configured (STORAGE_URL missing)")

        reasons: List[str] = []
        for bucket in self._buckets:
            content, reason = await self.download(bucket, path)
            if content is not None:
                logger.debug("Fetched %s from bucket %s (%d bytes)", path, bucket, len(content))
                return content
            logger.info("Storage miss for %s: %s", path, reason)
            reasons.append(reason)

        raise StorageFetchError(f"could not fetch {path}: " + " / ".join(reasons))
