# order_tracking/adapters/shopify_client.py
"""
Thin async client for the commerce platform Admin API.

One REST call or one GraphQL document per method call, decoded JSON back,
no schema validation: callers treat every field as optional. Failures are
reported through the `order_tracking.adapters.errors` taxonomy:

  * network failure        -> TransportError
  * status outside 2xx     -> UpstreamError(status_code, body)
  * body is not JSON       -> DecodeError
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from json import JSONDecodeError
from typing import Any, AsyncIterator, Dict, Mapping, Optional

import httpx

from order_tracking.adapters.errors import (
    DecodeError,
    GraphQLUserError,
    TransportError,
    UpstreamError,
)
from order_tracking.core.config import AppSettings
from order_tracking.obs.metrics import platform_requests_total

logger = logging.getLogger(__name__)

LOG_BODY_LIMIT = 500
ACCESS_TOKEN_HEADER = "X-Shopify-Access-Token"


class ShopifyClient:
    """
    Parameters:
        http: an open `httpx.AsyncClient` whose base_url is the Admin API root
              (".../admin/api/<version>/").
        access_token: value for the access token header on platform calls.
    """

    def __init__(self, http: httpx.AsyncClient, access_token: str) -> None:
        self._http = http
        self._access_token = access_token

    @property
    def _headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            ACCESS_TOKEN_HEADER: self._access_token,
        }

    # ---------- REST ----------

    async def rest(
        self,
        endpoint: str,
        method: str = "GET",
        *,
        params: Optional[Mapping[str, Any]] = None,
        json: Optional[Any] = None,
    ) -> Any:
        """Call `<base>/<endpoint>` and return the decoded JSON body."""
        path = endpoint.lstrip("/")
        resp = await self._send(
            "rest",
            method.upper(),
            path,
            params=params,
            json=json,
            headers=self._headers,
        )
        payload = self._decode("rest", resp, path)
        platform_requests_total.labels("rest", "ok").inc()
        return payload

    # ---------- GraphQL ----------

    async def graphql(self, query: str, variables: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        """
        POST a GraphQL document. Returns the whole decoded payload
        (`{"data": ..., "extensions": ...}`); a top-level `errors` list is
        reported as UpstreamError even on HTTP 200.
        """
        body: Dict[str, Any] = {"query": query}
        if variables:
            body["variables"] = dict(variables)
        resp = await self._send("graphql", "POST", "graphql.json", json=body, headers=self._headers)
        payload = self._decode("graphql", resp, "graphql.json")
        if isinstance(payload, dict) and payload.get("errors"):
            platform_requests_total.labels("graphql", "upstream").inc()
            raise UpstreamError(resp.status_code, payload["errors"], endpoint="graphql.json")
        platform_requests_total.labels("graphql", "ok").inc()
        return payload

    @staticmethod
    def mutation_result(payload: Mapping[str, Any], operation: str) -> Dict[str, Any]:
        """Pick `data.<operation>` out of a mutation payload, raising on userErrors."""
        result = (payload.get("data") or {}).get(operation) or {}
        user_errors = result.get("userErrors") or []
        if user_errors:
            raise GraphQLUserError(operation, user_errors)
        return result

    # ---------- staged upload ----------

    async def upload_to_staged_target(
        self,
        url: str,
        parameters: Any,
        *,
        filename: str,
        content_type: str,
        data: bytes,
    ) -> None:
        """
        Multipart POST of raw bytes to a staged upload target (object storage).

        `parameters` is the target's `[{name, value}]` list; they go first as
        form fields, the file last. The platform token is not sent here.
        """
        fields = {p["name"]: p["value"] for p in (parameters or [])}
        files = {"file": (filename, data, content_type)}
        resp = await self._send("staged_upload", "POST", url, data=fields, files=files)
        if not 200 <= resp.status_code < 300:
            platform_requests_total.labels("staged_upload", "upstream").inc()
            raise UpstreamError(resp.status_code, resp.text, endpoint="staged-upload")
        platform_requests_total.labels("staged_upload", "ok").inc()
        logger.info("File uploaded to staged target (%s bytes)", len(data))

    # ---------- internals ----------

    async def _send(self, kind: str, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            resp = await self._http.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            platform_requests_total.labels(kind, "transport").inc()
            logger.warning("Platform %s %s %s failed: %s", kind, method, url, exc)
            raise TransportError(f"{method} {url}: {exc}") from exc

        logger.info("API Response Status: %s (%s %s)", resp.status_code, method, url)
        logger.info("API Response Body: %s", resp.text[:LOG_BODY_LIMIT])
        return resp

    def _decode(self, kind: str, resp: httpx.Response, endpoint: str) -> Any:
        if not 200 <= resp.status_code < 300:
            platform_requests_total.labels(kind, "upstream").inc()
            try:
                body: Any = resp.json()
            except (JSONDecodeError, UnicodeDecodeError):
                body = resp.text
            raise UpstreamError(resp.status_code, body, endpoint=endpoint)

        try:
            payload = resp.json()
        except (JSONDecodeError, UnicodeDecodeError) as exc:
            platform_requests_total.labels(kind, "decode").inc()
            raise DecodeError(resp.status_code, resp.text) from exc

        return payload


@asynccontextmanager
async def open_shopify_client(
    settings: AppSettings,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> AsyncIterator[ShopifyClient]:
    """Own an httpx.AsyncClient for the duration of one inbound request."""
    async with httpx.AsyncClient(
        base_url=settings.platform_base_url,
        timeout=settings.PLATFORM_TIMEOUT_SECONDS,
        transport=transport,
    ) as http:
        yield ShopifyClient(http, settings.SHOPIFY_ACCESS_TOKEN)
