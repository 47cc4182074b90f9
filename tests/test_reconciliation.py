"""Tests for snapshot reconciliation into the room model."""

from datetime import datetime, timezone
from typing import Any, Dict, List

import pytest

from conftest import BEDROOM, LIVING_ROOM, make_raw_device
from dashboard import DashboardContext, ThemeRegistry, apply_snapshot, reconcile, transform_device
from dashboard.models import STATIC_COLOR_THEMES
from dashboard.reconciliation import classify_color, map_icon


def device_ids(room) -> List[str]:
    return [device.id for device in room.devices]


class TestTransformDevice:
    """Tests for transform_device."""

    def test_light(self) -> None:
        """Test a light carries level, color and on state."""
        device = transform_device(
            make_raw_device("l1", name="Desk", is_on=True, lightLevel=63, colorTemperature=4000)
        )

        assert device.id == "l1"
        assert device.name == "Desk"
        assert device.type == "light"
        assert device.available is True
        assert device.on is True
        assert device.value == 63
        assert device.color == "white"
        assert device.battery_level is None

    def test_blinds(self) -> None:
        """Test blinds carry position and battery."""
        device = transform_device(
            make_raw_device("b1", "blinds", name="Blind", blindsCurrentLevel=70, batteryPercentage=55)
        )

        assert device.value == 70
        assert device.battery_level == 55
        assert device.color is None

    def test_controller_battery(self) -> None:
        """Test controllers only carry battery level."""
        device = transform_device(
            make_raw_device("r1", "controller", name="Remote", batteryPercentage=9)
        )

        assert device.battery_level == 9
        assert device.value == 0

    def test_missing_fields_default(self) -> None:
        """Test sparse records fall back to safe defaults instead of raising."""
        device = transform_device({"id": "l9", "type": "light"})

        assert device.name == "light"
        assert device.available is False
        assert device.on is False
        assert device.value == 0
        assert device.color == "yellow"

    def test_unreachable(self) -> None:
        """Test reachability maps to availability."""
        device = transform_device(make_raw_device("l1", reachable=False))

        assert device.available is False

    @pytest.mark.parametrize("level, expected", [(150, 100), (-5, 0), ("50", 0), (True, 0)])
    def test_level_clamped(self, level: Any, expected: int) -> None:
        """Test malformed or out-of-range levels are normalized."""
        device = transform_device(make_raw_device("l1", lightLevel=level))

        assert device.value == expected


class TestClassifyColor:
    """Tests for classify_color."""

    @pytest.mark.parametrize(
        "temperature, expected",
        [
            (4000, "white"),
            (3001, "white"),
            (3000, "yellow"),
            (2700, "yellow"),
            (2501, "yellow"),
            (2500, "orange"),
            (2200, "orange"),
            (None, "yellow"),
            (0, "yellow"),
        ],
    )
    def test_thresholds(self, temperature: Any, expected: str) -> None:
        """Test the thresholds and the absent-reading default."""
        assert classify_color(temperature) == expected


class TestMapIcon:
    """Tests for map_icon."""

    def test_known_and_unknown(self) -> None:
        """Test known hub icons map and unknown ones fall back to home."""
        assert map_icon("rooms_sofa") == "fa-couch"
        assert map_icon("rooms_cutlery") == "fa-utensils"
        assert map_icon("rooms_garage") == "fa-home"
        assert map_icon(None) == "fa-home"


class TestReconcile:
    """Tests for reconcile."""

    def test_groups_by_room(self, sample_snapshot: List[Dict[str, Any]]) -> None:
        """Test devices are grouped per room in order of first appearance."""
        rooms = reconcile([], sample_snapshot, ThemeRegistry())

        assert [room.id for room in rooms] == ["room-living", "room-bed"]
        living = rooms[0]
        assert living.name == "Living Room"
        assert living.icon == "fa-couch"
        assert living.is_open is True
        assert [c.id for c in living.controllers] == ["remote-1"]

    def test_drops_unknown_and_roomless(self, sample_snapshot: List[Dict[str, Any]]) -> None:
        """Test gateways, unsupported types and devices without a room are dropped."""
        rooms = reconcile([], sample_snapshot, ThemeRegistry())

        all_ids = {d.id for room in rooms for d in room.devices + room.controllers}
        assert "gw-1" not in all_ids
        assert "speaker-1" not in all_ids
        assert "light-orphan" not in all_ids

    def test_left_before_right_then_natural(self, sample_snapshot: List[Dict[str, Any]]) -> None:
        """Test left precedes right and numbers sort by value."""
        rooms = reconcile([], sample_snapshot, ThemeRegistry())

        names = [device.name for device in rooms[0].devices]
        assert names.index("Left Blind") < names.index("Right Blind")
        assert names.index("Lamp 2") < names.index("Lamp 10")
        assert names == ["Lamp 2", "Lamp 10", "Left Blind", "Right Blind"]

    def test_natural_order_case_insensitive(self) -> None:
        """Test ordering ignores case."""
        snapshot = [
            make_raw_device("b", name="bulb"),
            make_raw_device("a", name="Attic"),
            make_raw_device("c", name="Ceiling"),
        ]

        rooms = reconcile([], snapshot, ThemeRegistry())

        assert device_ids(rooms[0]) == ["a", "b", "c"]

    def test_idempotent(self, sample_snapshot: List[Dict[str, Any]]) -> None:
        """Test reconciling the same snapshot twice yields an equal room list."""
        themes = ThemeRegistry()
        first = reconcile([], sample_snapshot, themes)
        second = reconcile(first, sample_snapshot, themes)

        assert second == first
        assert second is not first

    def test_order_independent_of_snapshot_order(
        self, sample_snapshot: List[Dict[str, Any]]
    ) -> None:
        """Test device order within a room does not depend on snapshot order."""
        forward = reconcile([], sample_snapshot, ThemeRegistry())
        backward = reconcile([], list(reversed(sample_snapshot)), ThemeRegistry())

        living_forward = next(r for r in forward if r.id == "room-living")
        living_backward = next(r for r in backward if r.id == "room-living")
        assert device_ids(living_forward) == device_ids(living_backward)

    def test_preserves_open_state(self, sample_snapshot: List[Dict[str, Any]]) -> None:
        """Test a collapsed room stays collapsed and new rooms start open."""
        themes = ThemeRegistry()
        previous = reconcile([], sample_snapshot, themes)
        previous[0].is_open = False

        study = {"id": "room-study", "name": "Study", "icon": "rooms_desk"}
        snapshot = sample_snapshot + [make_raw_device("light-study", name="Study Lamp", room=study)]
        rooms = reconcile(previous, snapshot, themes)

        by_id = {room.id: room for room in rooms}
        assert by_id["room-living"].is_open is False
        assert by_id["room-bed"].is_open is True
        assert by_id["room-study"].is_open is True
        assert by_id["room-study"].icon == "fa-briefcase"

    def test_removed_room_disappears(self, sample_snapshot: List[Dict[str, Any]]) -> None:
        """Test a room whose devices vanished is not carried over."""
        themes = ThemeRegistry()
        previous = reconcile([], sample_snapshot, themes)

        rooms = reconcile(previous, [d for d in sample_snapshot if d.get("room") != BEDROOM], themes)

        assert [room.id for room in rooms] == ["room-living"]

    def test_skips_malformed_records(self) -> None:
        """Test non-object records and rooms without an id are ignored."""
        snapshot = [
            "garbage",
            None,
            make_raw_device("l1", name="No Room Id", room={"name": "Ghost"}),
            make_raw_device("l2", name="Lamp", room=LIVING_ROOM),
        ]

        rooms = reconcile([], snapshot, ThemeRegistry())

        assert len(rooms) == 1
        assert device_ids(rooms[0]) == ["l2"]

    @pytest.mark.parametrize(
        "raw, expected_name, expected_value",
        [
            ({"id": "l1", "type": "light", "room": LIVING_ROOM, "attributes": "bad"}, "light", 0),
            (make_raw_device("l1", name=None, customName=42), "light", 0),
            (make_raw_device("l1", name="Lamp", lightLevel=float("nan")), "Lamp", 0),
            (make_raw_device("l1", name="Lamp", lightLevel=float("inf")), "Lamp", 0),
            (make_raw_device("b1", "blinds", name="Blind", blindsCurrentLevel=float("-inf")), "Blind", 0),
            (make_raw_device("b1", "blinds", name="Blind", batteryPercentage=float("nan")), "Blind", 0),
        ],
    )
    def test_malformed_fields_degrade_to_defaults(
        self, raw: Dict[str, Any], expected_name: str, expected_value: int
    ) -> None:
        """Test malformed device fields fall back to defaults instead of raising."""
        rooms = reconcile([], [raw, make_raw_device("l2", name="Other")], ThemeRegistry())

        device = next(d for d in rooms[0].devices if d.id == raw["id"])
        assert device.name == expected_name
        assert device.value == expected_value
        assert device.battery_level is None

    @pytest.mark.parametrize(
        "room",
        [
            {"id": "room-x", "name": {"nested": "name"}, "icon": "rooms_bed"},
            {"id": "room-x", "name": ["list"], "icon": {"nested": "icon"}},
            {"id": "room-x", "name": 7},
        ],
    )
    def test_malformed_room_reference(self, room: Dict[str, Any]) -> None:
        """Test unusable room names and icons still produce a room."""
        rooms = reconcile([], [make_raw_device("l1", name="Lamp", room=room)], ThemeRegistry())

        assert len(rooms) == 1
        assert rooms[0].name == ""
        assert rooms[0].icon in ("fa-bed", "fa-home")
        assert device_ids(rooms[0]) == ["l1"]

    def test_gateway_with_malformed_attributes(self) -> None:
        """Test a gateway record with non-object attributes still yields a status."""
        context = DashboardContext()

        apply_snapshot(context, [{"id": "gw", "type": "gateway", "isReachable": True, "attributes": []}])

        assert context.gateway.reachable is True
        assert context.gateway.next_sunrise is None

    def test_ordering_is_case_folded(self) -> None:
        """Test names that only differ after case folding sort numerically."""
        snapshot = [
            make_raw_device("b", name="STRASSE 2"),
            make_raw_device("a", name="Straße 1"),
            make_raw_device("c", name="LEFT Blind"),
            make_raw_device("d", name="right blind"),
        ]

        rooms = reconcile([], snapshot, ThemeRegistry())

        assert device_ids(rooms[0]) == ["c", "d", "a", "b"]


class TestThemes:
    """Tests for room color assignment."""

    def test_stable_across_refreshes(self, sample_snapshot: List[Dict[str, Any]]) -> None:
        """Test a room keeps its colors across reconciliations."""
        themes = ThemeRegistry()
        first = reconcile([], sample_snapshot, themes)
        second = reconcile(first, list(reversed(sample_snapshot)), themes)

        first_themes = {room.id: room.theme for room in first}
        second_themes = {room.id: room.theme for room in second}
        assert first_themes == second_themes

    def test_assigned_in_order_and_cycles(self) -> None:
        """Test the palette is handed out in order and wraps around."""
        themes = ThemeRegistry()
        count = len(STATIC_COLOR_THEMES)

        assigned = [themes.theme_for(f"Room {i}") for i in range(count + 1)]

        assert assigned[:count] == list(STATIC_COLOR_THEMES)
        assert assigned[count] == STATIC_COLOR_THEMES[0]
        assert themes.theme_for("Room 0") == STATIC_COLOR_THEMES[0]


class TestApplySnapshot:
    """Tests for apply_snapshot and the gateway header."""

    def test_gateway_status(self, sample_snapshot: List[Dict[str, Any]]) -> None:
        """Test the gateway record feeds the header status."""
        context = DashboardContext()

        apply_snapshot(context, sample_snapshot)

        gateway = context.gateway
        assert gateway is not None
        assert gateway.reachable is True
        assert gateway.model == "DIRIGERA Hub for smart products"
        assert gateway.firmware_version == "2.615.3"
        assert gateway.next_sunrise == datetime(2025, 3, 1, 6, 12, tzinfo=timezone.utc)
        assert gateway.latitude == 59.33
        assert len(context.rooms) == 2

    def test_gateway_kept_when_absent(self, sample_snapshot: List[Dict[str, Any]]) -> None:
        """Test a snapshot without a gateway leaves the last header status in place."""
        context = DashboardContext()
        apply_snapshot(context, sample_snapshot)
        gateway = context.gateway

        apply_snapshot(context, [d for d in sample_snapshot if d["type"] != "gateway"])

        assert context.gateway is gateway

    def test_toggle_room_open(self, sample_snapshot: List[Dict[str, Any]]) -> None:
        """Test collapsing a room survives the next refresh."""
        context = DashboardContext()
        apply_snapshot(context, sample_snapshot)

        assert context.toggle_room_open("room-bed") is False
        apply_snapshot(context, sample_snapshot)

        assert context.find_room("room-bed").is_open is False
        with pytest.raises(KeyError):
            context.toggle_room_open("room-missing")
