"""Public IP, provider and coarse location lookup for the host itself."""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, Iterable, Optional, Tuple

import requests

from ..config import GeoIPConfig
from .models import UNKNOWN, HostIdentity

LOGGER = logging.getLogger(__name__)

IPV4_RE = re.compile(r"^\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3}$")


def _join(*parts: Optional[str]) -> str:
    return ", ".join(part for part in parts if part) or UNKNOWN


def lookup_public_ip(session: requests.Session, settings: GeoIPConfig) -> str:
    for url in settings.ip_services:
        try:
            response = session.get(url, timeout=settings.timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            LOGGER.debug("Public IP service %s failed: %s", url, exc)
            continue
        candidate = (response.text or "").strip()
        if IPV4_RE.match(candidate):
            return candidate
        LOGGER.debug("Public IP service %s returned non-IPv4 payload", url)
    return UNKNOWN


def _fetch_json(session: requests.Session, url: str, timeout: int) -> Optional[Dict[str, Any]]:
    try:
        response = session.get(url, timeout=timeout, headers={"Accept": "application/json"})
        response.raise_for_status()
        data = response.json()
    except (requests.RequestException, ValueError) as exc:
        LOGGER.debug("Geolocation lookup %s failed: %s", url, exc)
        return None
    return data if isinstance(data, dict) else None


def _from_primary(data: Dict[str, Any]) -> Optional[Tuple[str, str]]:
    if data.get("status") == "fail":
        return None
    provider = data.get("org") or data.get("isp") or UNKNOWN
    return provider, _join(data.get("city"), data.get("regionName"), data.get("country"))


def _from_fallback(data: Dict[str, Any]) -> Optional[Tuple[str, str]]:
    if "error" in data:
        return None
    return data.get("org") or UNKNOWN, _join(data.get("city"), data.get("region"), data.get("country"))


def lookup_provider(ip: str, session: requests.Session, settings: GeoIPConfig) -> Tuple[str, str]:
    """Resolve (provider, location) for ``ip``; ``("Unknown", "Unknown")`` on failure."""
    if not ip or ip == UNKNOWN:
        return UNKNOWN, UNKNOWN

    lookups: Iterable = (
        (settings.primary_lookup, _from_primary),
        (settings.fallback_lookup, _from_fallback),
    )
    for template, extract in lookups:
        data = _fetch_json(session, template.format(ip=ip), settings.timeout)
        if data is None:
            continue
        resolved = extract(data)
        if resolved is not None:
            return resolved
    return UNKNOWN, UNKNOWN


def resolve_host_identity(session: requests.Session, settings: GeoIPConfig) -> HostIdentity:
    ip = lookup_public_ip(session, settings)
    provider, location = lookup_provider(ip, session, settings)
    LOGGER.info("Host identity: ip=%s provider=%s location=%s", ip, provider, location)
    return HostIdentity(ip=ip, provider=provider, location=location)
