"""Plots of functions over distributions on three secrets, as gnuplot scripts."""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import numpy as np

_STEPS = 30

# Corners of the simplex, in (a, b) coordinates of a prior (a, b, 1 - a - b).
_CORNERS = {"x_1": (1, 0), "x_2": (0, 1), "x_3": (0, 0)}
_LABEL_OFFSETS = {"x_1": (0.02, -0.05), "x_2": (0.02, 0.0), "x_3": (0.0, 0.02)}


def _at(corner: str) -> str:
    a, b = _CORNERS[corner]
    return f"px({a},{b}),py({a},{b})"


def _script() -> list[str]:
    """The gnuplot commands that follow the inline data block."""
    out = [
        "EOD",
        "",
        "# largest value, used for the height of the corner axes",
        "stats $data matrix using (valid(3) ? column(3) : 0) nooutput",
        "",
        "set terminal qt size 600,600 font 'Verdana,10'",
        "",
        "# a prior (a,b,c) is drawn at (c/2 + b, c*sqrt(3)/2) inside an equilateral triangle",
        "px(a,b) = (1.0 - a - b)/2 + b",
        "py(a,b) = (1.0 - a - b)*sqrt(3)/2",
        "",
        "unset border; unset xtics; unset ytics",
    ]

    edges = [("x_1", "x_3"), ("x_3", "x_2"), ("x_2", "x_1")]
    for number, (start, stop) in enumerate(edges, start=1):
        out.append(f"set arrow {number} from {_at(start)} to {_at(stop)} nohead front lt -1 lw 1")

    for number, name in enumerate(_CORNERS, start=1):
        a, b = _CORNERS[name]
        dx, dy = _LABEL_OFFSETS[name]
        out.append(f'set label {number} "{name}" at px({a},{b})+{dx},py({a},{b})+{dy}')

    out.append("set zzeroaxis")
    for number, name in enumerate(("x_2", "x_3"), start=4):
        out.append(
            f"set arrow {number} from {_at(name)},0 to {_at(name)},STATS_max "
            "nohead front dt 3 lc rgb '#000000' lw 1"
        )

    out += [
        "",
        "set xrange [0:1]; set yrange [0:1]; set zrange [0:]",
        "set ticslevel 0",
        "set view 61, 41",
        "set hidden3d",
        "",
        "# matrix row a and column b hold the prior (a, b) / stepno, with b capped at stepno - a",
        "cap(a,b) = b < stepno - a ? b : stepno - a",
        "gx(a,b) = px(1.0*a/stepno, 1.0*cap(a,b)/stepno)",
        "gy(a,b) = py(1.0*a/stepno, 1.0*cap(a,b)/stepno)",
        "",
        "# in matrix mode column 1 is the column index and column 2 the row index",
        "splot $data matrix using (gx($2,$1)):(gy($2,$1)):3 title '' with lines linestyle 1",
        "",
        "pause mouse close",
    ]
    return out


def gnuplot_barycentric_3d(f: Callable[[np.ndarray], float], filename: str | Path) -> None:
    """Write a gnuplot script plotting f over all priors on three secrets.

    The value for prior (a, b, c) sits in row a, column b of the data matrix;
    where a + b would exceed 1, b is capped so the matrix covers the square.
    """
    lines = [
        "# data matrix: row a, column b holds f at the prior (a, b, stepno-a-b) / stepno",
        'set datafile separator ","',
        f"stepno = {_STEPS}",
        "$data << EOD",
    ]
    for i in range(_STEPS + 1):
        values = []
        for j in range(_STEPS + 1):
            jj = min(j, _STEPS - i)
            pi = np.array([i, jj, _STEPS - i - jj], dtype=float) / _STEPS
            values.append(f"{float(f(pi)):g}")
        lines.append(",".join(values))
    lines += _script()

    with open(filename, "w", encoding="utf-8") as file:
        file.write("\n".join(lines) + "\n")