"""Bar chart of the 7-day milk series as a list of draw commands.

Nothing here touches a real canvas. A front end replays the commands in order
on its own surface; coordinates are in logical units, and the leading
``Resize``/``Scale`` pair maps them onto the device pixels.
"""
import math
from dataclasses import asdict, dataclass
from typing import List, Optional, Sequence, Tuple

PADDING = 40
BAR_FILL = 0.6
MIN_SCALE = 10

TITLE = "Last 7 Days Milk Production (Liters)"
TITLE_FONT = "bold 14px Segoe UI"
LABEL_FONT = "10px Segoe UI"
TITLE_COLOR = "#374151"
AXIS_COLOR = "#e5e7eb"
BAR_COLOR = "#10b981"
LABEL_COLOR = "#6b7280"
VALUE_COLOR = "#374151"


@dataclass(frozen=True)
class Resize:
    width: int
    height: int

    def to_dict(self):
        return {"op": "resize", **asdict(self)}


@dataclass(frozen=True)
class Scale:
    factor: float

    def to_dict(self):
        return {"op": "scale", **asdict(self)}


@dataclass(frozen=True)
class Clear:
    width: float
    height: float

    def to_dict(self):
        return {"op": "clear", **asdict(self)}


@dataclass(frozen=True)
class Polyline:
    points: Tuple[Tuple[float, float], ...]
    color: str

    def to_dict(self):
        return {"op": "polyline", "points": [list(p) for p in self.points], "color": self.color}


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float
    color: str

    def to_dict(self):
        return {"op": "rect", **asdict(self)}


@dataclass(frozen=True)
class Text:
    text: str
    x: float
    y: float
    font: str
    color: str
    align: str = "left"

    def to_dict(self):
        return {"op": "text", **asdict(self)}


def _format_value(value: float) -> str:
    return f"{value:.12g}"


def bar_chart(series: Sequence[Tuple[str, float]], width: Optional[float],
              height: Optional[float], pixel_ratio: Optional[float] = 1.0) -> List:
    if not width or not height:
        return []
    if not math.isfinite(width) or not math.isfinite(height) or width <= 0 or height <= 0:
        return []
    if pixel_ratio is not None and not math.isfinite(pixel_ratio):
        return []
    # no room for bars inside the padding
    if not series or width <= PADDING * 2 or height <= PADDING * 2:
        return []
    ratio = pixel_ratio if pixel_ratio and pixel_ratio > 0 else 1.0

    W, H = float(width), float(height)
    commands = [
        Resize(int(round(W * ratio)), int(round(H * ratio))),
        Scale(ratio),
        Clear(W, H),
        Text(TITLE, 10, 20, TITLE_FONT, TITLE_COLOR),
    ]

    values = [float(v) for _, v in series]
    max_val = max(values + [MIN_SCALE])
    graph_h = H - PADDING * 2
    graph_w = W - PADDING * 2

    commands.append(Polyline(
        ((PADDING, PADDING), (PADDING, H - PADDING), (W - PADDING, H - PADDING)),
        AXIS_COLOR,
    ))

    step = graph_w / len(values)
    bar_w = step * BAR_FILL
    for i, ((label, _), val) in enumerate(zip(series, values)):
        h = (val / max_val) * graph_h
        x = PADDING + step * i + (step - bar_w) / 2
        y = H - PADDING - h
        centre = x + bar_w / 2
        commands.append(Rect(x, y, bar_w, h, BAR_COLOR))
        commands.append(Text(label, centre, H - PADDING + 15, LABEL_FONT, LABEL_COLOR, "center"))
        commands.append(Text(_format_value(val), centre, y - 5, LABEL_FONT, VALUE_COLOR, "center"))
    return commands
