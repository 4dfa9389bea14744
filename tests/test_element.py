# tests/test_element.py
"""
Tests for element variants and their capabilities.
"""

import pytest

from conftest import FakeNode
from stepdriver.element import (
    REGION_CAPABILITIES,
    TREE_CAPABILITIES,
    Capability,
    ElementFactory,
    RegionElement,
)
from stepdriver.exceptions import BackendError, CapabilityUnsupportedError
from stepdriver.geometry import Point, Region

HANDLE_ONLY = TREE_CAPABILITIES - REGION_CAPABILITIES


@pytest.fixture
def region_element(port, screen):
    return RegionElement(Region(100, 200, 50, 20), port, screen, write_pause=0)


@pytest.fixture
def factory(port, screen):
    return ElementFactory(port, screen, write_pause=0)


class TestCapabilities:
    """Tests for the capability sets."""

    def test_tree_is_superset(self):
        """Tree elements can do everything region elements can."""
        assert REGION_CAPABILITIES < TREE_CAPABILITIES
        assert HANDLE_ONLY == {Capability.TOGGLEABLE, Capability.INTROSPECTABLE,
                               Capability.FOCUSABLE, Capability.ENABLEMENT}

    @pytest.mark.parametrize("call", [
        lambda e: e.toggle_state(),
        lambda e: e.check(),
        lambda e: e.uncheck(),
        lambda e: e.toggle(1),
        lambda e: e.is_enabled(),
        lambda e: e.name,
        lambda e: e.automation_id,
        lambda e: e.focus(),
    ])
    def test_region_rejects_handle_operations(self, region_element, call):
        """Handle-backed operations raise CapabilityUnsupportedError on a region."""
        with pytest.raises(CapabilityUnsupportedError) as exc_info:
            call(region_element)
        assert exc_info.value.variant == "RegionElement"

    def test_region_has_no_handle(self, region_element):
        """Region elements expose no native handle."""
        assert region_element.native_handle is None
        assert not region_element.supports(Capability.FOCUSABLE)

    def test_unknown_attribute(self, region_element):
        """Names outside the handle operations stay plain AttributeErrors."""
        assert not hasattr(region_element, "selected_text")


class TestPointerOperations:
    """Tests for region-computed pointer operations."""

    def test_click_uses_corner_point(self, region_element, port):
        """click() lands 5px in from the left and bottom edges."""
        region_element.click()
        assert port.calls == [("click", Point(105, 215), "left", 1)]

    def test_center_variants(self, region_element, port):
        """Center, right and double clicks use the center point."""
        region_element.click_center()
        region_element.right_click()
        region_element.double_click()
        center = Point(125, 210)
        assert port.calls == [
            ("click", center, "left", 1),
            ("click", center, "right", 1),
            ("click", center, "left", 2),
        ]

    def test_drag_and_drop(self, region_element, port, screen):
        """Drag presses at the source; drop moves and releases at the target."""
        target = RegionElement(Region(300, 300, 20, 20), port, screen)
        region_element.drag()
        target.drop()
        assert [c[0] for c in port.calls] == ["press", "move", "release"]
        assert port.calls[-1][1] == Point(310, 310)

    def test_write_clears_then_types(self, region_element, port):
        """write() clicks, clears with select-all/delete and types."""
        region_element.write("hello")
        assert [c[0] for c in port.calls] == ["click", "click", "special_key", "special_key", "type_text"]
        assert port.calls[2] == ("special_key", "control", "a")
        assert port.calls[-1] == ("type_text", "hello")


class TestPresence:
    """Tests for is_displayed and is_vanished."""

    def test_displayed_on_screen(self, region_element):
        """A region overlapping the screen is displayed."""
        assert region_element.is_displayed()

    def test_off_screen_or_empty(self, port, screen):
        """Off-screen and empty regions are not displayed."""
        assert not RegionElement(Region(900, 700, 10, 10), port, screen).is_displayed()
        assert not RegionElement(Region(10, 10, 0, 10), port, screen).is_displayed()

    def test_vanished_follows_screen(self, region_element, screen):
        """is_vanished reports the screen-wide virtual flag."""
        assert not region_element.is_vanished()
        screen.virtual = True
        assert region_element.is_vanished()


class TestTreeElement:
    """Tests for tree-backed elements."""

    def test_factory_scales_rectangle(self, port, screen):
        """The factory divides native coordinates by the display scale."""
        node = FakeNode("Button", rect=(200, 100, 400, 160))
        element = ElementFactory(port, screen, scale=200).tree(node)
        assert element.region == Region(100, 50, 100, 30)

    def test_introspection(self, factory):
        """Name and automation id come from the node."""
        element = factory.tree(FakeNode("Edit", name="Email", automation_id="mailField"))
        assert element.name == "Email"
        assert element.automation_id == "mailField"

    def test_check_clicks_only_when_unchecked(self, factory, port):
        """check() clicks an unchecked box and leaves a checked one alone."""
        factory.tree(FakeNode("CheckBox", toggle_state=0)).check()
        assert len(port.named("click")) == 1
        factory.tree(FakeNode("CheckBox", toggle_state=1)).check()
        assert len(port.named("click")) == 1

    def test_uncheck(self, factory, port):
        """uncheck() clicks only a checked box."""
        factory.tree(FakeNode("CheckBox", toggle_state=1)).uncheck()
        factory.tree(FakeNode("CheckBox", toggle_state=0)).uncheck()
        assert len(port.named("click")) == 1

    def test_toggle_to_state(self, factory, port):
        """toggle() clicks when the current state differs from the wanted one."""
        element = factory.tree(FakeNode("CheckBox", toggle_state=2))
        element.toggle(2)
        assert port.named("click") == []
        element.toggle(0)
        assert len(port.named("click")) == 1

    def test_toggle_state_unavailable(self, factory):
        """A node without a toggle pattern raises BackendError."""
        with pytest.raises(BackendError):
            factory.tree(FakeNode("Button", toggle_state=None)).toggle_state()

    def test_window_operations(self, factory):
        """focus, maximize and close go to the native handle."""
        node = FakeNode("Window", enabled=False)
        element = factory.tree(node)
        element.focus()
        element.maximize()
        element.close()
        assert node.calls == ["set_focus", "maximize", "close"]
        assert element.is_enabled() is False
