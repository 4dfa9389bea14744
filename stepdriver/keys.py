# stepdriver/keys.py
"""
@file keys.py
@brief Key names accepted by shortcut steps, mapped to send_keys codes.
"""

from __future__ import annotations

import string
from typing import Dict, Iterable, List

KEY_CODES: Dict[str, str] = {
    "control": "VK_CONTROL",
    "ctrl": "VK_CONTROL",
    "alt": "VK_MENU",
    "shift": "VK_SHIFT",
    "windows": "VK_LWIN",
    "tab": "VK_TAB",
    "enter": "VK_RETURN",
    "space": "VK_SPACE",
    "backspace": "VK_BACK",
    "delete": "VK_DELETE",
    "insert": "VK_INSERT",
    "escape": "VK_ESCAPE",
    "up": "VK_UP",
    "down": "VK_DOWN",
    "left": "VK_LEFT",
    "right": "VK_RIGHT",
    "pageup": "VK_PRIOR",
    "pagedown": "VK_NEXT",
    "home": "VK_HOME",
    "end": "VK_END",
}
KEY_CODES.update({f"f{n}": f"VK_F{n}" for n in range(1, 13)})
KEY_CODES.update({c: c for c in string.ascii_lowercase + string.digits})

MODIFIERS = ("VK_CONTROL", "VK_MENU", "VK_SHIFT", "VK_LWIN")


def normalize_keys(keys: Iterable[str]) -> List[str]:
    """Lower-case key names and reject unknown ones with ValueError."""
    names = [str(k).strip().lower() for k in keys]
    unknown = [k for k in names if k not in KEY_CODES]
    if unknown:
        raise ValueError(f"Unknown key name(s): {', '.join(unknown)}")
    return names


def chord(keys: Iterable[str]) -> str:
    """
    send_keys sequence that presses keys in order and releases them in
    reverse order, e.g. control+shift+s.
    """
    codes = [KEY_CODES[k] for k in normalize_keys(keys)]
    downs = "".join(f"{{{code} down}}" for code in codes)
    ups = "".join(f"{{{code} up}}" for code in reversed(codes))
    return downs + ups
