"""
Org Chart Core — Department Colors

Pure function of the department name: a shift-and-subtract string hash
into a fixed palette, stable across processes (unlike the salted
built-in hash()).
"""

from __future__ import annotations

from typing import Dict, Iterable

from .constants import DEPARTMENT_PALETTE, NEUTRAL_COLOR

_UINT32 = 0xFFFFFFFF


def _to_int32(value: int) -> int:
    value &= _UINT32
    if value & 0x80000000:
        value -= 1 << 32
    return value


def string_hash32(text: str) -> int:
    """
    h = unit + ((h << 5) - h) over UTF-16 code units.

    Only the shift is done in signed 32-bit arithmetic; the running sum
    is not wrapped, so long names can leave the 32-bit range. This keeps
    palette indices in line with the web frontend's colouring.
    """
    h = 0
    data = text.encode("utf-16-le")
    for i in range(0, len(data), 2):
        unit = data[i] | (data[i + 1] << 8)
        h = unit + (_to_int32(_to_int32(h) << 5) - h)
    return h


def department_color(department_name: str | None) -> str:
    """Stable palette color for a department. Blank names get the neutral color."""
    if not department_name:
        return NEUTRAL_COLOR
    index = abs(string_hash32(department_name)) % len(DEPARTMENT_PALETTE)
    return DEPARTMENT_PALETTE[index]


def department_colors(department_names: Iterable[str]) -> Dict[str, str]:
    """Legend mapping, sorted by department name."""
    return {name: department_color(name) for name in sorted(set(department_names))}
