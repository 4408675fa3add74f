from __future__ import annotations

import logging

import httpx

from ..config import Settings
from ..schemas import IngestionEnvelope
from .base import DeliveryResult

log = logging.getLogger(__name__)


class CoreServiceClient:
    """POSTs one envelope per call to the central ingestion service. Never retries."""

    def __init__(self, cfg: Settings, http: httpx.AsyncClient) -> None:
        self.url = f"{cfg.LANDOMO_API_URL.rstrip('/')}/properties/ingest"
        self.api_key = cfg.LANDOMO_API_KEY
        self._http = http

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def send(self, envelope: IngestionEnvelope) -> DeliveryResult:
        try:
            r = await self._http.post(self.url, json=envelope.to_json_body(), headers=self._headers())
        except httpx.HTTPError as e:
            log.error("ingest failed portal_id=%s: %s: %s", envelope.portal_id, type(e).__name__, e)
            return DeliveryResult(ok=False, error=f"{type(e).__name__}: {e}")

        if 200 <= r.status_code < 300:
            log.debug("sent portal_id=%s", envelope.portal_id)
            return DeliveryResult(ok=True, status_code=r.status_code)

        body = r.text[:500]
        log.error("ingest rejected portal_id=%s status=%s body=%s", envelope.portal_id, r.status_code, body)
        return DeliveryResult(ok=False, status_code=r.status_code, error=f"HTTP {r.status_code}: {body}")
