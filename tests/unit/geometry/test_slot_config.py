import json

import pytest

from src.photobox.exceptions import InvalidSlotConfigError
from src.photobox.geometry import Slot, SlotConfig, clamp_slot, dump_slot_config, parse_slot_config


def test_parse_json_text() -> None:
    config = parse_slot_config('{"slots": [{"x": 100, "y": 50, "width": 200, "height": 300}]}')

    assert config.slots == [Slot(x=100, y=50, width=200, height=300)]
    assert config.primary == Slot(x=100, y=50, width=200, height=300)


def test_parse_accepts_decoded_mapping_and_ignores_extra_keys() -> None:
    config = parse_slot_config({"slots": [{"x": 1, "y": 2, "width": 3.5, "height": 4, "rotation": 9}], "v": 2})

    assert config.primary == Slot(x=1, y=2, width=3.5, height=4)


def test_parse_missing_slots_means_no_slot() -> None:
    config = parse_slot_config("{}")

    assert config.slots == []
    assert config.primary is None


def test_only_first_slot_is_primary() -> None:
    config = parse_slot_config(
        {"slots": [{"x": 0, "y": 0, "width": 10, "height": 10}, {"x": 5, "y": 5, "width": 1, "height": 1}]}
    )

    assert config.primary == Slot(x=0, y=0, width=10, height=10)
    assert len(config.slots) == 2


@pytest.mark.parametrize(
    "raw",
    [
        "not json",
        "[]",
        '{"slots": {}}',
        '{"slots": [1]}',
        '{"slots": [{"x": 0, "y": 0, "width": 10}]}',
        '{"slots": [{"x": "0", "y": 0, "width": 10, "height": 10}]}',
        '{"slots": [{"x": true, "y": 0, "width": 10, "height": 10}]}',
        '{"slots": [{"x": NaN, "y": 0, "width": 10, "height": 10}]}',
    ],
)
def test_parse_rejects_malformed_config(raw: str) -> None:
    with pytest.raises(InvalidSlotConfigError):
        parse_slot_config(raw)


def test_dump_is_byte_identical_after_parse() -> None:
    raw = '{"slots": [{"x": 100, "y": 50, "width": 200, "height": 300}]}'

    assert dump_slot_config(parse_slot_config(raw)) == raw


def test_dump_keeps_fractional_values() -> None:
    config = SlotConfig.single(Slot(x=10.0, y=20.5, width=33.25, height=40.0))

    assert json.loads(dump_slot_config(config)) == {
        "slots": [{"x": 10, "y": 20.5, "width": 33.25, "height": 40}]
    }


def test_clamp_returns_same_slot_when_inside() -> None:
    slot = Slot(x=100, y=50, width=200, height=300)

    assert clamp_slot(slot, (800, 600)) is slot


def test_clamp_trims_overflow() -> None:
    assert clamp_slot(Slot(x=700, y=-20, width=200, height=100), (800, 600)) == Slot(
        x=700, y=0, width=100, height=80
    )


def test_clamp_normalises_negative_size() -> None:
    assert clamp_slot(Slot(x=300, y=200, width=-100, height=-50), (800, 600)) == Slot(
        x=200, y=150, width=100, height=50
    )


def test_clamp_outside_image_has_no_area() -> None:
    assert clamp_slot(Slot(x=900, y=0, width=50, height=50), (800, 600)) is None
    assert clamp_slot(Slot(x=10, y=10, width=0, height=50), (800, 600)) is None


def test_validate_within() -> None:
    assert Slot(x=0, y=0, width=800, height=600).validate_within((800, 600))
    assert not Slot(x=1, y=0, width=800, height=600).validate_within((800, 600))
