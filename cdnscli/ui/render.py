"""Plain-text layout primitives used by the model and popup views.

All widths are terminal cells (``rich.cells``), so wide glyphs such as the
cross mark used in the Proxied column line up correctly.
"""

from __future__ import annotations

from rich.box import ROUNDED
from rich.cells import cell_len, get_character_cell_size, set_cell_size


def lines_of(block: str) -> list[str]:
    return block.split("\n") if block else [""]


def block_width(block: str) -> int:
    return max((cell_len(line) for line in lines_of(block)), default=0)


def pad(text: str, width: int) -> str:
    """Pad or truncate *text* to exactly *width* cells."""
    return set_cell_size(text, max(0, width))


def place(block: str, width: int, align: str = "center") -> str:
    """Align every line of *block* horizontally within *width* cells."""
    out = []
    for line in lines_of(block):
        gap = max(0, width - cell_len(line))
        if align == "center":
            left = gap // 2
        elif align == "right":
            left = gap
        else:
            left = 0
        out.append(pad(" " * left + line, max(width, cell_len(line))))
    return "\n".join(out)


def join_vertical(*blocks: str) -> str:
    """Stack blocks top to bottom, skipping empty ones."""
    return "\n".join(b for b in blocks if b)


def box(content: str, padding: int = 1, margin: int = 1, width: int = 0) -> str:
    """Draw a rich ``ROUNDED`` border around *content*.

    *width* is the minimum inner content width; lines are left aligned
    inside it.  *padding* is applied on all four sides inside the border,
    *margin* outside it.
    """
    inner = max(block_width(content), width)
    span = inner + 2 * padding
    left, right = ROUNDED.mid_left, ROUNDED.mid_right
    rows = [ROUNDED.get_top([span])]
    blank = left + " " * span + right
    rows.extend([blank] * padding)
    for line in lines_of(content):
        rows.append(left + " " * padding + pad(line, inner) + " " * padding + right)
    rows.extend([blank] * padding)
    rows.append(ROUNDED.get_bottom([span]))

    if margin:
        outer = cell_len(rows[0]) + 2 * margin
        side = " " * margin
        rows = [side + r + side for r in rows]
        rows = [" " * outer] * margin + rows + [" " * outer] * margin
    return "\n".join(rows)


def _split_cells(line: str, offset: int) -> tuple[str, str]:
    """Split *line* at cell *offset*; a wide glyph straddling it becomes spaces."""
    left = []
    pos = 0
    for idx, ch in enumerate(line):
        size = get_character_cell_size(ch)
        if pos + size > offset:
            right = line[idx:]
            if pos < offset:
                # wide char cut in half
                left.append(" " * (offset - pos))
                right = " " * (pos + size - offset) + line[idx + 1:]
            return "".join(left), right
        left.append(ch)
        pos += size
    return "".join(left) + " " * (offset - pos), ""


def _drop_cells(line: str, count: int) -> str:
    """Remove the first *count* cells of *line*."""
    _, right = _split_cells(line, count)
    return right


def overlay(foreground: str, background: str) -> str:
    """Composite *foreground* centered on top of *background*.

    The result keeps the background's size when the foreground fits; a
    foreground larger than the background grows the canvas.
    """
    fg_lines = lines_of(foreground)
    bg_lines = lines_of(background)
    fg_w = block_width(foreground)
    bg_w = max(block_width(background), fg_w)
    height = max(len(bg_lines), len(fg_lines))
    bg_lines = bg_lines + [""] * (height - len(bg_lines))

    top = (height - len(fg_lines)) // 2
    left = (bg_w - fg_w) // 2

    out = []
    for row, bg in enumerate(bg_lines):
        bg = pad(bg, bg_w)
        fg_row = row - top
        if 0 <= fg_row < len(fg_lines):
            before, rest = _split_cells(bg, left)
            after = _drop_cells(rest, fg_w)
            bg = before + pad(fg_lines[fg_row], fg_w) + after
        out.append(bg)
    return "\n".join(out)


def pluralize(count: int, singular: str, plural: str) -> str:
    return f"{count} {singular if count == 1 else plural}"
