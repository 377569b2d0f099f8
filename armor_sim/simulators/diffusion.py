"""Explicit 4-neighbour diffusion step over a row-major grid."""
from __future__ import annotations

from typing import Iterator, List, Sequence

SHARE = 5.0


def adjacent_tiles(index: int, width: int, size: int) -> Iterator[int]:
    """Orthogonal neighbours of ``index``: left, right, up, down. No wraparound."""
    if index % width != 0:
        yield index - 1
    if index % width != width - 1:
        yield index + 1
    if index >= width:
        yield index - width
    if index + width < size:
        yield index + width


def fdm(cells: Sequence[float], width: int) -> List[float]:
    """One time step: each cell sends 1/5 of its value to every existing
    neighbour and keeps the remainder, including the shares that would have
    gone to neighbours past the grid edge. Total mass is conserved.
    """
    if isinstance(width, bool) or not isinstance(width, int) or width < 1:
        raise ValueError(f"width must be a positive integer, got {width!r}")
    values = [float(c) for c in cells]
    size = len(values)
    if size % width != 0:
        raise ValueError(f"width {width} does not divide grid length {size}")

    out: List[float] = []
    for i, value in enumerate(values):
        neighbours = list(adjacent_tiles(i, width, size))
        incoming = sum(values[j] / SHARE for j in neighbours)
        out.append(value * (SHARE - len(neighbours)) / SHARE + incoming)
    return out


diffusion_step = fdm


def fdm_steps(cells: Sequence[float], width: int, steps: int) -> List[float]:
    if steps < 0:
        raise ValueError("steps must be >= 0")
    out = [float(c) for c in cells]
    for _ in range(steps):
        out = fdm(out, width)
    return out


__all__ = ["adjacent_tiles", "diffusion_step", "fdm", "fdm_steps"]
