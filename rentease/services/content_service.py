"""Headless content API client (read-only).

Responsibilities:
    * Fetch entry collections and single entries for the fleet catalog
    * Resolve linked image assets from the response ``includes``
    * Report itself unconfigured when no credentials are present
"""
from __future__ import annotations

import threading
from typing import Any, Dict, List, Optional

import requests

from rentease import config
from rentease.exceptions import ContentAPIError
from rentease.utils.logging import get_logger

LOG = get_logger("rentease.content")


def _resolve_links(value: Any, assets: Dict[str, str]) -> Any:
    """Replace Asset links (and lists of them) by the asset file URL."""
    if isinstance(value, list):
        resolved = [_resolve_links(v, assets) for v in value]
        return [v for v in resolved if v is not None]
    if isinstance(value, dict):
        sys = value.get("sys") or {}
        if sys.get("type") == "Link" and sys.get("linkType") == "Asset":
            return assets.get(sys.get("id"))
    return value


def _asset_index(payload: dict) -> Dict[str, str]:
    out: Dict[str, str] = {}
    for asset in (payload.get("includes") or {}).get("Asset", []) or []:
        aid = (asset.get("sys") or {}).get("id")
        url = (((asset.get("fields") or {}).get("file")) or {}).get("url")
        if aid and url:
            out[aid] = url
    return out


def _normalize_entry(item: dict, assets: Dict[str, str]) -> dict:
    sys = item.get("sys") or {}
    fields = {k: _resolve_links(v, assets) for k, v in (item.get("fields") or {}).items()}
    return {
        "id": sys.get("id"),
        "created_at": sys.get("createdAt"),
        "content_type": ((sys.get("contentType") or {}).get("sys") or {}).get("id"),
        "fields": fields,
    }


class ContentClient:
    """Thin wrapper over the content delivery API."""

    _inst = None
    _inst_lock = threading.Lock()

    def __init__(self, space_id: str = "", access_token: str = "", environment: str = "master",
                 base_url: str = config.DEFAULT_CONTENT_API_URL, timeout: int = 10,
                 session: Optional[requests.Session] = None) -> None:
        self.space_id = space_id
        self.access_token = access_token
        self.environment = environment or "master"
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    # ---------- Singleton ----------
    @classmethod
    def instance(cls) -> "ContentClient":
        with cls._inst_lock:
            if cls._inst is None:
                cls._inst = cls(**config.content_settings())
        return cls._inst

    @classmethod
    def reset_instance(cls, client: Optional["ContentClient"] = None) -> None:
        with cls._inst_lock:
            cls._inst = client

    @property
    def is_configured(self) -> bool:
        return bool(self.space_id and self.access_token)

    def _entries_url(self) -> str:
        return f"{self.base_url}/spaces/{self.space_id}/environments/{self.environment}/entries"

    def _get(self, params: Dict[str, Any]) -> dict:
        headers = {"Authorization": f"Bearer {self.access_token}"}
        try:
            resp = self.session.get(self._entries_url(), params=params, headers=headers, timeout=self.timeout)
        except requests.RequestException as exc:
            LOG.warning("content request failed params=%s err=%s", params, exc)
            raise ContentAPIError(f"Content API unreachable: {exc}") from exc
        if resp.status_code != 200:
            LOG.warning("content request status=%s params=%s", resp.status_code, params)
            raise ContentAPIError(f"Content API returned HTTP {resp.status_code}")
        try:
            payload = resp.json()
        except ValueError as exc:
            raise ContentAPIError("Content API returned invalid JSON") from exc
        if not isinstance(payload, dict):
            raise ContentAPIError("Content API returned an unexpected payload")
        return payload

    def get_entries(self, content_type: str, order: Optional[str] = None,
                    limit: Optional[int] = None, **field_filters: Any) -> List[dict]:
        """
        Entries of ``content_type``. ``field_filters`` map field names to exact
        values (``slug="bmw-x5"`` becomes ``fields.slug=bmw-x5``).
        """
        if not self.is_configured:
            return []
        params: Dict[str, Any] = {"content_type": content_type, "include": 1}
        if order:
            params["order"] = order
        if limit:
            params["limit"] = int(limit)
        for name, value in field_filters.items():
            params[f"fields.{name}"] = value
        payload = self._get(params)
        assets = _asset_index(payload)
        return [_normalize_entry(item, assets) for item in payload.get("items") or []]

    def get_entry(self, entry_id: str) -> Optional[dict]:
        """Single entry by id (with linked assets), or None."""
        if not self.is_configured or not entry_id:
            return None
        payload = self._get({"sys.id": entry_id, "include": 1, "limit": 1})
        items = payload.get("items") or []
        if not items:
            return None
        return _normalize_entry(items[0], _asset_index(payload))
