from __future__ import annotations

from dataclasses import asdict, fields
import json
from typing import List, Sequence, Tuple

from .session import RelaxationInputs

Point = Tuple[float, float, float]
Spring = Tuple[Point, Point]


def _point(p: Sequence[float]) -> Point:
    return (float(p[0]), float(p[1]), float(p[2]))


def add_spring(springs: Sequence[Spring], a: Sequence[float], b: Sequence[float]) -> List[Spring]:
    """Return a new list with a spring appended."""
    new = list(springs)
    new.append((_point(a), _point(b)))
    return new


def edit_spring(springs: Sequence[Spring], index: int, a: Sequence[float], b: Sequence[float]) -> List[Spring]:
    """Return a new list with the spring at *index* replaced."""
    new = list(springs)
    new[index] = (_point(a), _point(b))
    return new


def delete_spring(springs: Sequence[Spring], index: int) -> List[Spring]:
    """Return a new list with the spring at *index* removed."""
    new = list(springs)
    del new[index]
    return new


def nodes_from_springs(springs: Sequence[Spring]) -> List[Point]:
    """Unique spring endpoints in order of first appearance."""
    nodes: List[Point] = []
    for a, b in springs:
        for p in (_point(a), _point(b)):
            if p not in nodes:
                nodes.append(p)
    return nodes


def toggle_support(supports: Sequence[Point], p: Sequence[float]) -> List[Point]:
    """Return a new list with *p* added, or removed if already present."""
    p = _point(p)
    new = [_point(s) for s in supports]
    if p in new:
        new.remove(p)
    else:
        new.append(p)
    return new


def inputs_to_json(inputs: RelaxationInputs) -> str:
    """Serialize *inputs* to a JSON string. ``reset`` is not stored.

    Points may be any 3-sequence (numpy arrays included); they are written as
    plain float lists.
    """
    data = asdict(inputs)
    data.pop("reset")
    for key in ("nodes", "supports", "rollers", "loads"):
        data[key] = [_point(p) for p in data[key]]
    data["springs"] = [(_point(a), _point(b)) for a, b in data["springs"]]
    for key in ("stiffnesses", "nat_lengths", "mass_density"):
        data[key] = [float(v) for v in data[key]]
    data["mass_type"] = int(data["mass_type"])
    for key in ("damping", "gravity", "time_step"):
        data[key] = float(data[key])
    return json.dumps(data)


def inputs_from_json(data: str) -> RelaxationInputs:
    """Deserialize *data* into :class:`RelaxationInputs`.

    Unknown keys are ignored; missing keys take their defaults.
    """
    raw = json.loads(data)
    known = {f.name for f in fields(RelaxationInputs)} - {"reset"}
    kwargs = {k: v for k, v in raw.items() if k in known}
    for key in ("nodes", "supports", "rollers", "loads"):
        if key in kwargs:
            kwargs[key] = [_point(p) for p in kwargs[key]]
    if "springs" in kwargs:
        kwargs["springs"] = [(_point(a), _point(b)) for a, b in kwargs["springs"]]
    for key in ("stiffnesses", "nat_lengths", "mass_density"):
        if key in kwargs:
            kwargs[key] = [float(v) for v in kwargs[key]]
    return RelaxationInputs(**kwargs)


__all__ = [
    "Spring",
    "add_spring",
    "edit_spring",
    "delete_spring",
    "nodes_from_springs",
    "toggle_support",
    "inputs_to_json",
    "inputs_from_json",
]
