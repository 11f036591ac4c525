"""Pass-through client for the external insurance-charge prediction service."""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping

import httpx

from .errors import UpstreamError

logger = logging.getLogger("insurance_portal.prediction")

PREDICTION_FIELDS = ("age", "sex", "bmi", "children", "smoker", "region")


def build_prediction_payload(data: Mapping[str, Any]) -> Dict[str, Any]:
    """Pick the forwarded fields out of *data*, leaving values untouched.

    Fields absent from *data* are left out of the forwarded body.
    """

    return {name: data[name] for name in PREDICTION_FIELDS if name in data}


class PredictionClient:
    """Forward prediction requests and relay the upstream JSON body verbatim."""

    def __init__(
        self,
        url: str,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        cleaned = (url or "").strip()
        if not cleaned:
            raise ValueError("Prediction service URL must not be empty")
        self._url = cleaned
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    @property
    def url(self) -> str:
        return self._url

    async def predict(self, data: Mapping[str, Any]) -> Any:
        payload = build_prediction_payload(data)
        try:
            response = await self._client.post(self._url, json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise UpstreamError(
                f"Prediction service responded with {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise UpstreamError(f"Failed to contact prediction service: {exc}") from exc

        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamError("Prediction service returned a non-JSON body") from exc

    async def aclose(self) -> None:
        await self._client.aclose()


__all__ = ["PREDICTION_FIELDS", "PredictionClient", "build_prediction_payload"]
