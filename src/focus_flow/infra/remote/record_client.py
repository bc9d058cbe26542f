from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional, Tuple

import httpx

from focus_flow.domain.errors import StorageUnavailable

logger = logging.getLogger("focus_flow.remote")


class RecordStoreClient:
    """
    Thin async client for the hosted record-storage service.

    Every call returns the service envelope as-is:
        {"success": bool, "data" | "results": [...], "message": str?}
    Interpreting `success` is the caller's job; the one exception is a
    404 on a single-record read, reported as None. Only transport-level
    problems (no URL, connection errors, timeouts, non-JSON bodies) raise,
    always as StorageUnavailable.
    """

    def __init__(
        self,
        base_url: Optional[str],
        project_id: str = "",
        public_key: str = "",
        timeout_s: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/") if base_url else None
        self._http: Optional[httpx.AsyncClient] = None
        if self.base_url:
            headers = {"X-Project-Id": project_id}
            if public_key:
                headers["Authorization"] = f"Bearer {public_key}"
            self._http = httpx.AsyncClient(
                base_url=self.base_url,
                headers=headers,
                timeout=timeout_s,
                transport=transport,
            )

    async def aclose(self) -> None:
        if self._http is not None:
            await self._http.aclose()

    # ---------- records ----------
    async def fetch_records(self, table: str, params: Dict[str, Any]) -> Dict[str, Any]:
        return await self._call("POST", f"/api/tables/{table}/records/query", params)

    async def get_record_by_id(self, table: str, record_id: int, params: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Envelope for one record, or None when the service answers 404 for it."""
        status, payload = await self._send("POST", f"/api/tables/{table}/records/{record_id}/query", params)
        if status == 404 and not payload.get("success"):
            return None
        return payload

    async def create_records(self, table: str, records: List[Dict[str, Any]]) -> Dict[str, Any]:
        return await self._call("POST", f"/api/tables/{table}/records", {"records": records})

    async def update_records(self, table: str, records: List[Dict[str, Any]]) -> Dict[str, Any]:
        return await self._call("PATCH", f"/api/tables/{table}/records", {"records": records})

    async def delete_records(self, table: str, record_ids: List[int]) -> Dict[str, Any]:
        return await self._call("DELETE", f"/api/tables/{table}/records", {"RecordIds": record_ids})

    # ---------- plumbing ----------
    async def _call(self, method: str, path: str, body: Dict[str, Any]) -> Dict[str, Any]:
        _, payload = await self._send(method, path, body)
        return payload

    async def _send(self, method: str, path: str, body: Dict[str, Any]) -> Tuple[int, Dict[str, Any]]:
        if self._http is None:
            raise StorageUnavailable("record store client not initialized (no URL configured)")

        start = time.perf_counter()
        try:
            r = await self._http.request(method, path, json=body)
        except httpx.HTTPError as e:
            logger.error(
                "record_store.unreachable",
                extra={"category": "remote", "event": "record_store.unreachable", "method": method, "path": path, "error": str(e)},
            )
            raise StorageUnavailable(f"record store unreachable: {e}") from e

        duration_ms = round((time.perf_counter() - start) * 1000, 2)
        logger.debug(
            "record_store.response",
            extra={
                "category": "remote",
                "event": "record_store.response",
                "method": method,
                "path": path,
                "status_code": r.status_code,
                "duration_ms": duration_ms,
            },
        )

        try:
            payload = r.json()
        except ValueError as e:
            raise StorageUnavailable(f"record store returned non-JSON body ({r.status_code})") from e
        if not isinstance(payload, dict) or "success" not in payload:
            raise StorageUnavailable(f"record store returned an unexpected body ({r.status_code})")
        return r.status_code, payload
