from __future__ import annotations

from pdascan._constants import COMMON_DATA_KEYS, COMMON_SCANNER_ACTIONS, KEY_DECODER_DATA
from pdascan.ingestion.resolver import build_action_filter, build_candidate_keys, resolve_payload
from pdascan.models.scan import ScanEvent


def test_single_candidate_value_returned_unchanged() -> None:
    event = ScanEvent(tag="barcode.data", fields={"barcode": "  4006381333931 "})

    resolved = resolve_payload(event, build_candidate_keys())

    assert resolved is not None
    assert resolved.value == "  4006381333931 "
    assert resolved.key == "barcode"


def test_highest_priority_candidate_wins() -> None:
    event = ScanEvent(
        tag="barcode.data",
        fields={"scan_result": "LOW", "barcode": "MID", KEY_DECODER_DATA: "HIGH"},
    )

    resolved = resolve_payload(event, build_candidate_keys())

    assert resolved is not None
    assert resolved.value == "HIGH"
    assert resolved.key == KEY_DECODER_DATA


def test_empty_and_non_string_values_fall_through_to_next_candidate() -> None:
    event = ScanEvent(
        tag="barcode.data",
        fields={KEY_DECODER_DATA: "", "Decoder_DataArray": None, "data": "ABC"},
    )

    resolved = resolve_payload(event, build_candidate_keys())

    assert resolved is not None
    assert resolved.key == "data"


def test_non_candidate_keys_are_ignored() -> None:
    event = ScanEvent(tag="barcode.data", fields={"payload": "ABC", "extra": "DEF"})

    assert resolve_payload(event, build_candidate_keys()) is None


def test_no_fields_returns_none() -> None:
    assert resolve_payload(ScanEvent(tag="x"), build_candidate_keys()) is None


def test_extra_keys_appended_at_lowest_priority_without_duplicates() -> None:
    keys = build_candidate_keys(["custom", "barcode", " ", "custom"])

    assert keys[: len(COMMON_DATA_KEYS)] == COMMON_DATA_KEYS
    assert keys[-1] == "custom"
    assert keys.count("barcode") == 1
    assert len(keys) == len(COMMON_DATA_KEYS) + 1


def test_extra_key_resolves_when_builtin_keys_absent() -> None:
    keys = build_candidate_keys(["vendorPayload"])
    event = ScanEvent(tag="x", fields={"vendorPayload": "Z9"})

    resolved = resolve_payload(event, keys)

    assert resolved is not None
    assert resolved.value == "Z9"


def test_action_filter_keeps_vendor_actions_first() -> None:
    actions = build_action_filter(["com.example.SCAN"])

    assert actions[0] == COMMON_SCANNER_ACTIONS[0]
    assert actions[-1] == "com.example.SCAN"
