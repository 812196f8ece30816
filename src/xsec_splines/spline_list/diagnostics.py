"""Human-readable dumps of the spline list."""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, TextIO

from xsec_splines.numerical import Spline
from xsec_splines.units import XSEC_DISPLAY_UNIT, to_display_xsec

if TYPE_CHECKING:
    from .store import XSecSplineList


def format_spline_list(splines: XSecSplineList) -> str:
    lines = [
        "",
        " ******************* XSecSplineList *************************",
        " [-] Options:",
        "  |",
        f"  |-----o  UseLogE...................{int(splines.use_log_energy)}",
        f"  |-----o  Spline NKnots.............{splines.n_knots}",
        f"  |-----o  Spline Emin...............{splines.e_min:g}",
        f"  |-----o  Spline Emax...............{splines.e_max:g}",
        "  |",
        " [-] Available Splines:",
        "  |",
    ]
    for key in splines.keys():
        lines.append(f"  |-----o  {key}")
    return "\n".join(lines) + "\n"


def print_spline_list(splines: XSecSplineList, stream: TextIO | None = None) -> None:
    """Write the list options and its sorted keys to ``stream`` (stdout by default)."""
    out = stream if stream is not None else sys.stdout
    out.write(format_spline_list(splines))


def format_spline_summary(key: str, spline: Spline) -> str:
    """One-line summary: knot count, energy range, and cross-section range in 1e-38 cm^2."""
    y_min = to_display_xsec(float(spline.y.min()))
    y_max = to_display_xsec(float(spline.y.max()))
    return (
        f"{key}: {spline.n_knots} knots, E = [{spline.x_min:g}, {spline.x_max:g}] GeV, "
        f"xsec = [{y_min:g}, {y_max:g}] x {XSEC_DISPLAY_UNIT}"
    )
