"""Unit tests for Entity and EntityConfig."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from structlog.testing import capture_logs

from garden.core.entity import NO_SPRITE, Entity, EntityConfig
from garden.core.host import SCREEN_HEIGHT, SCREEN_WIDTH, HeadlessHost, SpriteFlag


@pytest.fixture
def host() -> HeadlessHost:
    """Create a headless host with sprite 7 flagged NO_TRANSFORM."""
    host = HeadlessHost(seed=1)
    host.set_sprite_flag(7, SpriteFlag.NO_TRANSFORM)
    return host


def test_entity_defaults():
    """Test that an all-defaults entity gets the documented values."""
    entity = Entity.from_config({})

    assert entity.x == 0
    assert entity.y == 0
    assert entity.sprite_id == NO_SPRITE == 255
    assert entity.color_key == 0
    assert entity.sprite_rotation == 0
    assert entity.sprite_flip == 0
    assert entity.sprite_scale == 1
    assert entity.composite_width == 1
    assert entity.composite_height == 1
    assert entity.sprite_size_x == 8
    assert entity.sprite_size_y == 8
    assert entity.gc_exempt is False


def test_entity_from_config_none():
    """Test that a missing config record behaves like an empty one."""
    entity = Entity.from_config(None)
    assert entity.sprite_id == NO_SPRITE
    assert entity.sprite_scale == 1


def test_entity_from_config_values():
    """Test that configured values are carried over."""
    entity = Entity.from_config(
        {
            "x": 12.5,
            "y": 40,
            "sprite_id": 3,
            "color_key": 6,
            "sprite_rotation": 2,
            "sprite_flip": 1,
            "sprite_scale": 2,
            "composite_width": 3,
            "composite_height": 2,
            "gc_exempt": True,
        }
    )

    assert entity.get_position() == (12.5, 40)
    assert entity.sprite_id == 3
    assert entity.color_key == 6
    assert entity.sprite_rotation == 2
    assert entity.sprite_flip == 1
    assert entity.sprite_size_x == 8 * 3 * 2
    assert entity.sprite_size_y == 8 * 2 * 2
    assert entity.gc_exempt is True


@pytest.mark.parametrize("field", ["sprite_scale", "composite_width", "composite_height"])
@pytest.mark.parametrize("value", [0, None, -2])
def test_sizing_fields_coerce_to_one(field: str, value):
    """Test that zero, None and negative sizing values become 1."""
    entity = Entity.from_config({field: value})
    assert getattr(entity, field) == 1
    assert entity.sprite_size_x == 8
    assert entity.sprite_size_y == 8


def test_sizing_fields_coerce_on_direct_construction():
    """Test that keyword construction applies the same coercion."""
    entity = Entity(sprite_scale=0, composite_width=0, composite_height=0)
    assert (entity.sprite_scale, entity.composite_width, entity.composite_height) == (1, 1, 1)


def test_sizing_invariant_holds_after_assignment():
    """Test that later assignments cannot break the >= 1 invariant."""
    entity = Entity(sprite_scale=3)
    entity.sprite_scale = 0
    entity.composite_width = 0
    assert entity.sprite_scale == 1
    assert entity.composite_width == 1
    assert entity.sprite_size_x == 8


@pytest.mark.parametrize(
    "scale,width,height",
    [(1, 1, 1), (2, 1, 1), (1, 3, 2), (4, 2, 5)],
)
def test_sprite_size_formula(scale: int, width: int, height: int):
    """Test sprite sizes are 8 * composite * scale on each axis."""
    entity = Entity.from_config(
        {"sprite_scale": scale, "composite_width": width, "composite_height": height}
    )
    assert entity.sprite_size_x == 8 * width * scale
    assert entity.sprite_size_y == 8 * height * scale


def test_sprite_size_follows_scale_changes():
    """Test derived sizes track the current scale."""
    entity = Entity(composite_width=2)
    entity.sprite_scale = 3
    assert entity.sprite_size_x == 48
    assert entity.sprite_size_y == 24


def test_none_values_fall_back_to_defaults():
    """Test that explicit None values use the defaults."""
    config = EntityConfig(x=None, y=None, sprite_id=None, gc_exempt=None)
    assert config.x == 0
    assert config.y == 0
    assert config.sprite_id == NO_SPRITE
    assert config.gc_exempt is False


def test_malformed_config_degrades_to_defaults():
    """Test unconvertible values fall back to defaults instead of raising."""
    entity = Entity.from_config(
        {
            "x": "left",
            "y": float("nan"),
            "sprite_id": "tree",
            "color_key": [3],
            "sprite_rotation": {},
            "sprite_flip": "x",
            "sprite_scale": "huge",
            "composite_width": object(),
            "composite_height": float("inf"),
            "gc_exempt": "maybe",
        }
    )

    assert entity.get_position() == (0, 0)
    assert entity.sprite_id == NO_SPRITE
    assert entity.color_key == 0
    assert entity.sprite_rotation == 0
    assert entity.sprite_flip == 0
    assert (entity.sprite_scale, entity.composite_width, entity.composite_height) == (1, 1, 1)
    assert entity.gc_exempt is False
    assert entity.get_is_onscreen() is True


def test_fractional_and_numeric_string_config():
    """Test numeric strings are read and fractional ints are rounded down."""
    entity = Entity.from_config(
        {"x": "12.5", "sprite_id": "7", "sprite_scale": 2.5, "composite_width": 0.5}
    )

    assert entity.x == 12.5
    assert entity.sprite_id == 7
    assert entity.sprite_scale == 2
    assert entity.composite_width == 1
    assert entity.sprite_size_x == 16


def test_direct_construction_with_none_values():
    """Test keyword construction maps None to every field default."""
    entity = Entity(
        x=None,
        y=None,
        sprite_id=None,
        color_key=None,
        sprite_rotation=None,
        sprite_flip=None,
        sprite_scale=None,
        gc_exempt=None,
    )

    assert entity.get_position() == (0, 0)
    assert entity.sprite_id == NO_SPRITE
    assert entity.color_key == 0
    assert entity.sprite_rotation == 0
    assert entity.sprite_flip == 0
    assert entity.sprite_scale == 1
    assert entity.gc_exempt is False
    assert entity.get_is_onscreen() is True


def test_assignment_of_none_resets_to_default():
    """Test later assignments are normalized like construction."""
    entity = Entity(x=40, sprite_id=3)
    entity.x = None
    entity.sprite_id = None
    assert entity.x == 0
    assert entity.sprite_id == NO_SPRITE


def test_config_ignores_unknown_fields():
    """Test that extra keys in a config record are ignored."""
    entity = Entity.from_config({"sprite_id": 4, "className": "Entity"})
    assert entity.sprite_id == 4


def test_to_config_round_trip():
    """Test snapshotting an entity back into a config record."""
    entity = Entity(x=5, y=6, sprite_id=9, sprite_scale=2)
    config = entity.to_config()
    assert config.x == 5
    assert config.sprite_id == 9
    assert config.sprite_scale == 2


def test_entities_compare_by_identity():
    """Test that two identical-looking entities are distinct."""
    a = Entity(sprite_id=1)
    b = Entity(sprite_id=1)
    assert a != b
    assert a == a
    assert len({a, b}) == 2


def test_get_position_has_no_side_effects():
    """Test get_position returns the pair without changing state."""
    entity = Entity(x=3, y=4)
    assert entity.get_position() == (3, 4)
    assert entity.get_position() == (3, 4)
    assert (entity.x, entity.y) == (3, 4)


@pytest.mark.parametrize(
    "x,y,expected",
    [
        (0, 0, True),
        (SCREEN_WIDTH, SCREEN_HEIGHT, True),
        (-8, -8, True),
        (-9, 0, False),
        (0, -9, False),
        (SCREEN_WIDTH + 1, 0, False),
        (0, SCREEN_HEIGHT + 1, False),
    ],
)
def test_get_is_onscreen_bounds(x: float, y: float, expected: bool):
    """Test onscreen check for a single 8x8 sprite."""
    entity = Entity(x=x, y=y)
    assert entity.get_is_onscreen() is expected


def test_get_is_onscreen_uses_per_axis_size():
    """Test each axis is bounded by its own sprite size.

    A 4x1 composite sprite is 32px wide and 8px tall: x may go down to -32,
    but y only down to -8.
    """
    entity = Entity(composite_width=4, composite_height=1)

    entity.x, entity.y = -32, 0
    assert entity.get_is_onscreen() is True

    entity.x, entity.y = 0, -9
    assert entity.get_is_onscreen() is False

    entity.x, entity.y = 0, -8
    assert entity.get_is_onscreen() is True


def test_draw_passes_configured_transform(host: HeadlessHost):
    """Test draw passes rotation and flip through for normal sprites."""
    entity = Entity(x=10, y=20, sprite_id=2, color_key=5, sprite_scale=2,
                    sprite_rotation=3, sprite_flip=1)

    entity.draw(host)

    calls = host.sprite_calls()
    assert len(calls) == 1
    assert calls[0].args == (2, 10, 20, 5, 2, 1, 3)


def test_draw_no_transform_flag_forces_zero(host: HeadlessHost):
    """Test the asset-level NO_TRANSFORM flag overrides rotation and flip."""
    entity = Entity(x=1, y=2, sprite_id=7, color_key=0, sprite_rotation=2, sprite_flip=3)

    entity.draw(host)

    sprite_id, x, y, color_key, scale, flip, rotation = host.sprite_calls()[0].args
    assert (sprite_id, x, y, color_key, scale) == (7, 1, 2, 0, 1)
    assert flip == 0
    assert rotation == 0


def test_draw_queries_flag_bit_zero():
    """Test draw asks the host about flag bit 0 of its own sprite."""
    host = MagicMock()
    host.sprite_flag.return_value = False
    entity = Entity(sprite_id=12, sprite_rotation=1)

    entity.draw(host)

    host.sprite_flag.assert_called_once_with(12, 0)
    host.draw_sprite.assert_called_once_with(12, 0, 0, 0, 1, 0, 1)


def test_base_update_logs_and_does_not_raise(host: HeadlessHost):
    """Test calling the base update reports a diagnostic and returns."""
    entity = Entity()

    with capture_logs() as logs:
        result = entity.update(host)

    assert result is None
    assert len(logs) == 1
    assert logs[0]["event"] == "base_entity_update_called"
    assert logs[0]["log_level"] == "warning"
    assert logs[0]["kind"] == "Entity"
    assert host.calls == []
