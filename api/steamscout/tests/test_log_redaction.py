"""Ensure log redaction prevents secret leakage."""

from __future__ import annotations

import logging

import pytest

from steamscout.core.errors import UpstreamError
from steamscout.ingestion.steam_web import SteamWebConnector
from steamscout.tests.utils import OWNED_PATH, STEAM_ID
from steamscout.utils.redaction import redact_secrets


def test_redact_secrets_masks_keys_ids_and_userinfo() -> None:
    text = "GET https://user:pw@api.example/?key=abc123&steamid=7656119&format=json Bearer tok.en"

    redacted = redact_secrets(text)

    assert "abc123" not in redacted
    assert "7656119" not in redacted
    assert "pw@" not in redacted
    assert "tok.en" not in redacted
    assert "format=json" in redacted


@pytest.mark.asyncio
async def test_upstream_failures_never_leak_the_api_key(fake_steam, upstream_client, caplog) -> None:
    fake_steam.failing_paths[OWNED_PATH] = 503
    connector = SteamWebConnector(upstream_client, api_key="supersecret")

    caplog.set_level(logging.DEBUG, logger="steamscout")
    with pytest.raises(UpstreamError) as excinfo:
        await connector.get_owned_games(STEAM_ID)

    assert "supersecret" not in str(excinfo.value)
    steamscout_lines = " ".join(
        record.getMessage() for record in caplog.records if record.name.startswith("steamscout")
    )
    assert "supersecret" not in steamscout_lines
    assert excinfo.value.upstream_status == 503
