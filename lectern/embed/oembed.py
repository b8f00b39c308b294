"""Embeddability preflight via YouTube's oEmbed endpoint."""

from __future__ import annotations

import dataclasses
import logging
from typing import Optional

import requests

from lectern.embed.platforms import EmbedTarget, Platform, watch_url

logger = logging.getLogger(__name__)

OEMBED_URL = "https://www.youtube.com/oembed"


def probe_embeddable(
    target: EmbedTarget,
    *,
    session: Optional[requests.Session] = None,
    timeout: float = 5,
) -> bool:
    """Return False when the provider says the video cannot be embedded.

    Network problems answer True: the iframe gets to try and the player's
    own fallback handling takes over from there.
    """

    if target.platform is not Platform.YOUTUBE or not target.canonical_id:
        return True

    http = session or requests
    params = {"url": watch_url(target), "format": "json"}
    try:
        resp = http.get(OEMBED_URL, params=params, timeout=timeout)
    except requests.RequestException as exc:
        logger.warning("oEmbed preflight failed for %s: %s", target.canonical_id, exc)
        return True

    if resp.status_code == 200:
        return True
    if resp.status_code in (401, 403):
        logger.info("Video %s has embedding disabled", target.canonical_id)
        return False
    if resp.status_code == 404:
        logger.info("Video %s not found", target.canonical_id)
        return False
    logger.debug("oEmbed returned %s for %s", resp.status_code, target.canonical_id)
    return True


def with_preflight(target: EmbedTarget, **kwargs) -> EmbedTarget:
    if probe_embeddable(target, **kwargs):
        return target
    return dataclasses.replace(target, embeddable=False)
