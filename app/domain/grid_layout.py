# app/domain/grid_layout.py
from dataclasses import dataclass, replace
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from app.delivery.schemas.body import FrameView

# Largest breakpoint first; a viewport uses the first one whose min width it reaches.
BREAKPOINTS: Dict[str, int] = {"lg": 1200, "md": 996, "sm": 768, "xs": 480, "xxs": 0}
COLS: Dict[str, int] = {"lg": 6, "md": 4, "sm": 2, "xs": 1, "xxs": 1}

ROW_HEIGHT = 150
MARGIN_X = 10
MARGIN_Y_EDITING = 50
MARGIN_Y_VIEWING = 25


@dataclass(frozen=True)
class Cell:
    i: str
    x: int
    y: int
    w: int
    h: int

    def collides(self, other: "Cell") -> bool:
        if self.i == other.i:
            return False
        return (
            self.x < other.x + other.w
            and other.x < self.x + self.w
            and self.y < other.y + other.h
            and other.y < self.y + self.h
        )


def frame_layout(frames: Iterable[FrameView]) -> List[Cell]:
    return [Cell(i=f.id, x=f.x, y=f.y, w=f.width, h=f.height) for f in frames]


def clamp(cell: Cell, cols: int) -> Cell:
    """Fit a cell inside ``cols`` columns without moving it vertically."""
    w = max(1, min(cell.w, cols))
    x = min(max(cell.x, 0), cols - w)
    return replace(cell, x=x, w=w, y=max(cell.y, 0), h=max(cell.h, 1))


def _first_collision(cell: Cell, placed: Sequence[Cell]) -> Optional[Cell]:
    for other in placed:
        if cell.collides(other):
            return other
    return None


def _rise(cell: Cell, placed: Sequence[Cell]) -> Cell:
    """Move a cell up to the row where stepping up once more would overlap.

    Solved per placed cell, never row by row.
    """
    top = 0
    for other in placed:
        if other.x >= cell.x + cell.w or cell.x >= other.x + other.w:
            continue
        # rows r with other overlapping the cell placed at r: other.y - h < r < other.y + other.h
        if other.y - cell.h + 1 > cell.y - 1:
            continue
        top = max(top, min(cell.y - 1, other.y + other.h - 1) + 1)
    return replace(cell, y=top)


def compact(cells: Iterable[Cell], cols: int) -> List[Cell]:
    """Clamp every cell to ``cols`` and pack the grid upwards.

    Cells are placed in (y, x) order. Each one rises while the spot above is
    free, then drops below whatever it still overlaps. The result keeps the
    input order.
    """
    order = sorted(enumerate(cells), key=lambda pair: (pair[1].y, pair[1].x))
    placed: List[Tuple[int, Cell]] = []
    for index, cell in order:
        cell = clamp(cell, cols)
        others = [c for _, c in placed]
        cell = _rise(cell, others)
        collision = _first_collision(cell, others)
        while collision is not None:
            cell = replace(cell, y=collision.y + collision.h)
            collision = _first_collision(cell, others)
        placed.append((index, cell))
    return [cell for _, cell in sorted(placed, key=lambda pair: pair[0])]


def responsive_layouts(cells: Sequence[Cell]) -> Dict[str, List[Cell]]:
    return {name: compact(cells, COLS[name]) for name in BREAKPOINTS}


def margins(editing: bool) -> Tuple[int, int]:
    return (MARGIN_X, MARGIN_Y_EDITING if editing else MARGIN_Y_VIEWING)


def _media_query(name: str) -> Optional[str]:
    lower = BREAKPOINTS[name]
    larger = [bp for bp in BREAKPOINTS.values() if bp > lower]
    parts = []
    if lower > 0:
        parts.append(f"(min-width: {lower}px)")
    if larger:
        parts.append(f"(max-width: {min(larger) - 1}px)")
    return " and ".join(parts) or None


def grid_css(frames: Sequence[FrameView], editing: bool, selector: str = ".layout") -> str:
    """CSS grid rules placing each frame, one media block per breakpoint.

    Items are addressed as ``[data-grid-id="<frame id>"]``; drag and resize
    are not supported, the grid is display only.
    """
    gap_x, gap_y = margins(editing)
    layouts = responsive_layouts(frame_layout(frames))
    blocks = []
    for name, cells in layouts.items():
        rules = [
            f"{selector} {{ display: grid; grid-template-columns: repeat({COLS[name]}, minmax(0, 1fr)); "
            f"grid-auto-rows: {ROW_HEIGHT}px; gap: {gap_y}px {gap_x}px; }}"
        ]
        for cell in cells:
            rules.append(
                f'{selector} > [data-grid-id="{cell.i}"] {{ grid-column: {cell.x + 1} / span {cell.w}; '
                f"grid-row: {cell.y + 1} / span {cell.h}; }}"
            )
        body = "\n".join(rules)
        query = _media_query(name)
        blocks.append(f"@media {query} {{\n{body}\n}}" if query else body)
    return "\n".join(blocks)
