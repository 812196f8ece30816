"""Cross-section spline list: cache, knot planning, and XML persistence.

This package provides the process-wide cache of cross-section splines keyed
by (algorithm, interaction), the knot planner and builder used to fill it,
and the streaming XML reader/writer used to carry it across runs.
"""

from .builder import build_spline, compute_cross_sections
from .diagnostics import format_spline_list, format_spline_summary, print_spline_list
from .keys import KEY_DELIMITER, build_spline_key, split_spline_key
from .knots import MIN_REQUESTED_KNOTS, SUBTHRESHOLD_KNOTS, KnotPlanner
from .store import XSecSplineList, instance, reset_instance
from .xml_codec import (
    FORMAT_VERSION,
    ROOT_TAG,
    ReaderState,
    SplineListReader,
    XmlParserStatus,
    load_from_xml,
    read_spline_list,
    save_as_xml,
    write_spline_list,
)

__all__ = [
    # Store
    "XSecSplineList",
    "instance",
    "reset_instance",
    # Keys
    "KEY_DELIMITER",
    "build_spline_key",
    "split_spline_key",
    # Knot planning and building
    "KnotPlanner",
    "MIN_REQUESTED_KNOTS",
    "SUBTHRESHOLD_KNOTS",
    "build_spline",
    "compute_cross_sections",
    # XML persistence
    "FORMAT_VERSION",
    "ROOT_TAG",
    "ReaderState",
    "SplineListReader",
    "XmlParserStatus",
    "load_from_xml",
    "read_spline_list",
    "save_as_xml",
    "write_spline_list",
    # Diagnostics
    "format_spline_list",
    "format_spline_summary",
    "print_spline_list",
]
