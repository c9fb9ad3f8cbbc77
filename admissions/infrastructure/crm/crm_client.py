from __future__ import annotations

import logging
from typing import Any

import httpx


class CrmClient:
    def __init__(
        self,
        base_url: str,
        access_token: str | None = None,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._access_token = access_token
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._logger = logging.getLogger(__name__)

    def _headers(self) -> dict[str, str]:
        if not self._access_token:
            return {}
        return {"Authorization": f"Bearer {self._access_token}"}

    async def get_student(self, student_id: str) -> httpx.Response:
        return await self._client.get(f"{self._base_url}/students/{student_id}", headers=self._headers())

    async def create_application(self, payload: dict[str, Any]) -> dict[str, Any]:
        resp = await self._client.post(f"{self._base_url}/applications", json=payload, headers=self._headers())
        if resp.status_code >= 400:
            try:
                error_message = resp.json().get("message")
            except Exception:
                error_message = resp.text
            self._logger.error(
                "Application creation failed",
                extra={
                    "status": resp.status_code,
                    "error": error_message,
                    "subject_id": payload.get("studentId"),
                },
            )
            resp.raise_for_status()
        return resp.json()

    async def aclose(self) -> None:
        await self._client.aclose()
