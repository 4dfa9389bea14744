# tests/conftest.py
"""
In-memory fakes for the desktop seams (tree, screen, input) and an engine
factory wired to them.
"""

from types import SimpleNamespace

import numpy as np
import pytest
from PIL import Image

from stepdriver.config import Settings
from stepdriver.engine import build_engine
from stepdriver.eventhub import EventHub
from stepdriver.interfaces import ICapabilityPort, IScreen, ITreeSource


class FakeNode:
    """Stand-in for a pywinauto UIA wrapper."""

    def __init__(self, control_type, name="", automation_id="", help_text="", value=None,
                 rect=(0, 0, 100, 20), enabled=True, toggle_state=0, children=None):
        self.element_info = SimpleNamespace(
            name=name,
            automation_id=automation_id,
            control_type=control_type,
            element=SimpleNamespace(CurrentHelpText=help_text),
        )
        self.value = value
        self.rect = rect
        self.enabled = enabled
        self.toggle_state = toggle_state
        self._children = list(children or [])
        self.calls = []

    def add(self, *nodes):
        self._children.extend(nodes)
        return self

    def rectangle(self):
        left, top, right, bottom = self.rect
        return SimpleNamespace(left=left, top=top, right=right, bottom=bottom)

    @staticmethod
    def _accept(node, criteria):
        if "control_type" in criteria and node.element_info.control_type != criteria["control_type"]:
            return False
        if "title" in criteria and node.element_info.name != criteria["title"]:
            return False
        return True

    def children(self, **criteria):
        return [c for c in self._children if self._accept(c, criteria)]

    def descendants(self, **criteria):
        found = []
        for child in self._children:
            if self._accept(child, criteria):
                found.append(child)
            found.extend(child.descendants(**criteria))
        return found

    def is_enabled(self):
        return self.enabled

    def set_focus(self):
        self.calls.append("set_focus")

    def get_toggle_state(self):
        if self.toggle_state is None:
            raise RuntimeError("no toggle pattern")
        return self.toggle_state

    def legacy_properties(self):
        return {"Value": self.value}

    def maximize(self):
        self.calls.append("maximize")

    def close(self):
        self.calls.append("close")

    def __repr__(self):
        return f"FakeNode({self.element_info.control_type}, {self.element_info.name!r})"


class FakeDesktop(ITreeSource):
    """Tree source whose root holds the top-level windows."""

    def __init__(self, *windows):
        self.desktop = FakeNode("Pane", name="Desktop", rect=(0, 0, 800, 600), children=windows)
        self.top_level_calls = 0
        self.fail_with = None

    def root(self):
        if self.fail_with is not None:
            raise self.fail_with
        return self.desktop

    def top_level(self):
        self.top_level_calls += 1
        return self.desktop.children()


class FakePort(ICapabilityPort):
    """Records every call as (method, args...)."""

    def __init__(self):
        self.calls = []
        self.fail_on = {}

    def _record(self, name, *args):
        self.calls.append((name,) + args)
        if name in self.fail_on:
            raise self.fail_on[name]

    def named(self, name):
        return [c for c in self.calls if c[0] == name]

    def click(self, point, button="left", clicks=1):
        self._record("click", point, button, clicks)

    def move(self, point):
        self._record("move", point)

    def press(self, point, button="left"):
        self._record("press", point, button)

    def release(self, point, button="left"):
        self._record("release", point, button)

    def type_text(self, text):
        self._record("type_text", text)

    def paste(self, text):
        self._record("paste", text)

    def special_key(self, *keys):
        self._record("special_key", *keys)

    def release_all_keys(self):
        self._record("release_all_keys")

    def scroll(self, direction, steps):
        self._record("scroll", direction, steps)

    def launch_app(self, path):
        self._record("launch_app", path)

    def close_app(self, path):
        self._record("close_app", path)

    def close_all_apps(self):
        self._record("close_all_apps")


class FakeScreen(IScreen):
    """Screen backed by a PIL image."""

    def __init__(self, image=None, virtual=False):
        self.image = image if image is not None else Image.new("RGB", (800, 600), "white")
        self.virtual = virtual

    def size(self):
        return self.image.size

    def grab(self, region=None):
        if region is None:
            return self.image.copy()
        return self.image.crop(region.as_box())

    def is_virtual(self):
        return self.virtual


def noise_image(width, height, seed):
    """Random RGB noise; template matching finds such patches unambiguously."""
    rng = np.random.default_rng(seed)
    return Image.fromarray(rng.integers(0, 256, size=(height, width, 3), dtype=np.uint8), "RGB")


def ocr_table(words):
    """
    Build an image_to_data style dict from (text, left, top, width, height, line) tuples.
    """
    data = {k: [] for k in ("text", "conf", "block_num", "par_num", "line_num", "left", "top", "width", "height")}
    for text, left, top, width, height, line in words:
        data["text"].append(text)
        data["conf"].append(95)
        data["block_num"].append(1)
        data["par_num"].append(1)
        data["line_num"].append(line)
        data["left"].append(left)
        data["top"].append(top)
        data["width"].append(width)
        data["height"].append(height)
    return data


FAST = dict(
    find_wait=0.3,
    max_wait=0.5,
    reduced_find_wait=0.1,
    polling_interval=0.05,
    backend_retry_interval=0.01,
    window_search_attempts=2,
    step_delay=0.0,
    write_pause=0.0,
    scroll_pause=0.0,
    url_pause=0.0,
    action_waits={
        "assert_exist": 0.2,
        "assert_not_exist": 0.2,
        "assert_enabled": 0.2,
        "assert_not_enabled": 0.2,
        "drag_find": 0.2,
        "focus_display": 0.2,
    },
)


@pytest.fixture
def port():
    return FakePort()


@pytest.fixture
def screen():
    return FakeScreen()


@pytest.fixture
def login_window():
    """A login dialog with three edits and an OK button."""
    return FakeNode("Window", name="Login - MyApp", rect=(100, 100, 500, 400), children=[
        FakeNode("Edit", name="Username", automation_id="userField", help_text="Your user name",
                 value="alice", rect=(120, 140, 320, 160)),
        FakeNode("Edit", name="UserAge", automation_id="ageField", rect=(120, 170, 320, 190)),
        FakeNode("Edit", name="Email", automation_id="mailField", rect=(120, 200, 320, 220)),
        FakeNode("CheckBox", name="Remember me", automation_id="remember", rect=(120, 230, 320, 250)),
        FakeNode("Button", name="OK", automation_id="okButton", rect=(120, 300, 200, 330)),
    ])


@pytest.fixture
def desktop(login_window):
    return FakeDesktop(login_window)


@pytest.fixture
def make_engine(port, screen, desktop, tmp_path):
    """Factory: make_engine(ocr=None, **settings) -> Engine on the fakes."""

    def _make(ocr=None, tree=None, display=None, **overrides):
        values = dict(FAST, image_dir=str(tmp_path), repo_path=str(tmp_path))
        values.update(overrides)
        return build_engine(
            Settings(**values),
            port,
            display or screen,
            tree or desktop,
            ocr=ocr,
            sink=EventHub(),
        )

    return _make
