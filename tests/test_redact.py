from __future__ import annotations

from raspinfo._redact import MASK, redact_for_log
from raspinfo.config import BusStop, RaspInfoConfig


def test_redact_for_log_masks_api_key_in_config() -> None:
    config = RaspInfoConfig(hsl_api_key="very-secret", bus_stops=(BusStop(id="E2185", name="Home"),))

    redacted = redact_for_log(config)

    assert redacted["hsl_api_key"] == MASK
    assert redacted["weather_location"] == "Espoo"
    assert redacted["bus_stops"] == [{"id": "E2185", "name": "Home"}]


def test_redact_for_log_keeps_empty_key_visible() -> None:
    assert redact_for_log(RaspInfoConfig())["hsl_api_key"] == ""


def test_redact_for_log_redacts_nested_headers() -> None:
    payload = {"headers": {"digitransit-subscription-key": "abc", "accept": "json"}, "token": "t"}

    redacted = redact_for_log(payload)

    assert redacted["headers"]["digitransit-subscription-key"] == MASK
    assert redacted["headers"]["accept"] == "json"
    assert redacted["token"] == MASK


def test_redact_for_log_truncates_long_strings() -> None:
    long_value = "x" * 600
    redacted = redact_for_log({"value": long_value}, max_string=10)
    assert redacted["value"].startswith("x" * 10)
    assert "<truncated>" in redacted["value"]
