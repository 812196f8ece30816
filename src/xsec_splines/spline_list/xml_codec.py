"""XML persistence for the cross-section spline list.

File layout::

    <?xml version="1.0" encoding="ISO-8859-1"?>
    <genie_xsec_spline_list version="2.00" uselog="1">
      <spline name="<key>" nknots="<n>">
        <knot> <E> 0.01 </E> <xsec> 1.5e-12 </xsec> </knot>
        ...
      </spline>
      ...
    </genie_xsec_spline_list>

Energies are in GeV and cross sections in natural units (GeV^-2). Values are
written with ``repr`` so a save/load cycle reproduces every knot bit for bit.

Loading streams the document with ElementTree.iterparse and discards each
spline's elements once it has been stored, so memory stays bounded by one
spline rather than the whole file. The reader is an explicit state machine
(see SplineListReader); elements must appear in document order with the
nesting above, and unrecognised elements are ignored.

Load outcomes are reported as an XmlParserStatus rather than raised: the
caller decides whether a missing or malformed spline file is fatal. When a
document fails part-way, splines completed before the failure remain in the
list (and in its initial-set); nothing is rolled back.
"""

from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import IO, TYPE_CHECKING, TextIO
from xml.sax.saxutils import escape, quoteattr

import numpy as np

from xsec_splines.numerical import Spline

if TYPE_CHECKING:
    from .store import XSecSplineList

logger = logging.getLogger(__name__)

ROOT_TAG = "genie_xsec_spline_list"
SPLINE_TAG = "spline"
KNOT_TAG = "knot"
ENERGY_TAG = "E"
XSEC_TAG = "xsec"
FORMAT_VERSION = "2.00"
FILE_ENCODING = "ISO-8859-1"

# Whitespace that attribute-value normalization would turn into spaces.
_ATTR_ENTITIES = {"\t": "&#9;", "\n": "&#10;", "\r": "&#13;"}
_LEADING_INT_RE = re.compile(r"\s*[+-]?\d+")


class XmlParserStatus(str, Enum):
    """Outcome of loading a spline file."""

    OK = "ok"
    INVALID_ROOT = "invalid_root"
    NOT_PARSED = "not_parsed"
    NOT_FOUND = "not_found"

    @property
    def is_ok(self) -> bool:
        return self is XmlParserStatus.OK

    @property
    def message(self) -> str:
        return _STATUS_MESSAGES[self]


_STATUS_MESSAGES = {
    XmlParserStatus.OK: "XML file was successfully parsed",
    XmlParserStatus.INVALID_ROOT: "XML doc. has invalid root element",
    XmlParserStatus.NOT_PARSED: "XML file could not be parsed",
    XmlParserStatus.NOT_FOUND: "XML file could not be found",
}


# =============================================================================
# Writing
# =============================================================================


def _format_value(value: float) -> str:
    return repr(float(value))


def write_spline(stream: TextIO, key: str, spline: Spline) -> None:
    """Write one <spline> block."""
    stream.write(f"<{SPLINE_TAG} name={quoteattr(key, _ATTR_ENTITIES)} nknots=\"{spline.n_knots}\">\n")
    for energy, xsec in spline.knots():
        stream.write(
            f"  <{KNOT_TAG}> <{ENERGY_TAG}> {escape(_format_value(energy))} </{ENERGY_TAG}>"
            f" <{XSEC_TAG}> {escape(_format_value(xsec))} </{XSEC_TAG}> </{KNOT_TAG}>\n"
        )
    stream.write(f"</{SPLINE_TAG}>\n")


def write_spline_list(splines: XSecSplineList, stream: TextIO, save_initial: bool = True) -> int:
    """Write the spline list document to an open text stream.

    Args:
        splines: The spline list to write.
        stream: Text stream; should encode as ISO-8859-1 to match the declaration.
        save_initial: Include splines whose keys came from a previous load.

    Returns:
        Number of splines written.
    """
    stream.write(f'<?xml version="1.0" encoding="{FILE_ENCODING}"?>\n\n')
    stream.write(f"<!-- generated by {__name__} -->\n\n")
    uselog = 1 if splines.use_log_energy else 0
    stream.write(f'<{ROOT_TAG} version="{FORMAT_VERSION}" uselog="{uselog}">\n\n')

    written = 0
    for key, spline in splines.items():
        if not save_initial and splines.is_initial(key):
            logger.debug("Skipping initially loaded spline: %s", key)
            continue
        write_spline(stream, key, spline)
        written += 1

    stream.write(f"</{ROOT_TAG}>\n")
    return written


def save_as_xml(splines: XSecSplineList, path: str | Path, save_initial: bool = True) -> bool:
    """Save the spline list to an XML file.

    A destination that cannot be created or written is logged and reported
    by returning False; no exception is raised.

    Returns:
        True if the file was written completely.
    """
    out_path = Path(path)
    logger.info("Saving XSecSplineList as XML in file: %s", out_path)
    try:
        with open(out_path, "w", encoding=FILE_ENCODING, errors="xmlcharrefreplace") as f:
            written = write_spline_list(splines, f, save_initial=save_initial)
    except OSError as e:
        logger.error("Couldn't write spline file %s: %s", out_path, e)
        return False
    logger.info("Wrote %d splines to %s", written, out_path)
    return True


# =============================================================================
# Reading
# =============================================================================


class _InvalidRootError(Exception):
    pass


class _SplineFormatError(Exception):
    pass


class ReaderState(Enum):
    """Position of the reader within the spline list document."""

    AWAIT_ROOT = "await_root"
    IN_ROOT = "in_root"
    IN_SPLINE = "in_spline"
    IN_KNOT = "in_knot"
    IN_KNOT_ENERGY = "in_knot_energy"
    IN_KNOT_XSEC = "in_knot_xsec"
    DONE = "done"


START = "start"
END = "end"

# (state, event, tag) -> (element depth, next state). Depth 0 is the root.
# Events not listed here leave the state unchanged.
TRANSITIONS: dict[tuple[ReaderState, str, str], tuple[int, ReaderState]] = {
    (ReaderState.IN_ROOT, START, SPLINE_TAG): (1, ReaderState.IN_SPLINE),
    (ReaderState.IN_SPLINE, START, KNOT_TAG): (2, ReaderState.IN_KNOT),
    (ReaderState.IN_KNOT, START, ENERGY_TAG): (3, ReaderState.IN_KNOT_ENERGY),
    (ReaderState.IN_KNOT, START, XSEC_TAG): (3, ReaderState.IN_KNOT_XSEC),
    (ReaderState.IN_KNOT_ENERGY, END, ENERGY_TAG): (3, ReaderState.IN_KNOT),
    (ReaderState.IN_KNOT_XSEC, END, XSEC_TAG): (3, ReaderState.IN_KNOT),
    (ReaderState.IN_KNOT, END, KNOT_TAG): (2, ReaderState.IN_SPLINE),
    (ReaderState.IN_SPLINE, END, SPLINE_TAG): (1, ReaderState.IN_ROOT),
    (ReaderState.IN_ROOT, END, ROOT_TAG): (0, ReaderState.DONE),
}


@dataclass(slots=True)
class _SplineBuffer:
    """Knot values of the spline currently being read.

    The declared nknots is only compared against, never allocated from, so a
    corrupt count cannot exhaust memory.
    """

    name: str
    declared: int
    energies: list[float] = field(default_factory=list)
    xsecs: list[float] = field(default_factory=list)
    energy: float | None = None
    xsec: float | None = None

    @property
    def count(self) -> int:
        return len(self.energies)

    def close_knot(self) -> None:
        if self.energy is None or self.xsec is None:
            raise _SplineFormatError(f"Knot {self.count} of spline {self.name!r} lacks an energy or cross section")
        if self.count >= self.declared:
            raise _SplineFormatError(f"Spline {self.name!r} has more knots than its declared nknots={self.declared}")
        self.energies.append(self.energy)
        self.xsecs.append(self.xsec)
        self.energy = None
        self.xsec = None

    def to_spline(self) -> Spline:
        if self.count != self.declared:
            raise _SplineFormatError(
                f"Spline {self.name!r} declares nknots={self.declared} but contains {self.count} knots"
            )
        try:
            return Spline(np.asarray(self.energies), np.asarray(self.xsecs))
        except ValueError as e:
            raise _SplineFormatError(f"Spline {self.name!r} has invalid knots: {e}") from e


def _attribute(elem: ET.Element, name: str) -> str | None:
    value = elem.get(name)
    return value.strip() if value is not None else None


def _leading_int(text: str) -> int:
    """Integer prefix of ``text`` (so "1.0" reads as 1); 0 when there is none."""
    match = _LEADING_INT_RE.match(text)
    return int(match.group()) if match else 0


def _parse_float(text: str | None, what: str) -> float:
    try:
        return float((text or "").strip())
    except ValueError as e:
        raise _SplineFormatError(f"Invalid {what} value: {text!r}") from e


class SplineListReader:
    """State machine that loads a spline list document into an XSecSplineList.

    Feed it (event, element) pairs from ElementTree.iterparse with events
    ("start", "end"). Each spline is inserted into the list, and marked as
    initial, when its closing tag is reached.
    """

    def __init__(self, splines: XSecSplineList) -> None:
        self._splines = splines
        self.state = ReaderState.AWAIT_ROOT
        self.depth = 0
        self.loaded: list[str] = []
        self._root: ET.Element | None = None
        self._buffer: _SplineBuffer | None = None

    def handle(self, event: str, elem: ET.Element) -> None:
        if event == START:
            depth = self.depth
            self.depth += 1
        else:
            self.depth -= 1
            depth = self.depth

        if self.state is ReaderState.AWAIT_ROOT:
            if event == START:
                self._enter_root(elem)
            return

        transition = TRANSITIONS.get((self.state, event, elem.tag))
        if transition is None:
            return
        expected_depth, next_state = transition
        if depth != expected_depth:
            return

        if event == START:
            self._on_start(elem)
        else:
            self._on_end(elem)
        self.state = next_state

    def _enter_root(self, elem: ET.Element) -> None:
        logger.debug("Root element = %s", elem.tag)
        if elem.tag != ROOT_TAG:
            raise _InvalidRootError(elem.tag)
        self._root = elem
        version = _attribute(elem, "version")
        uselog = _attribute(elem, "uselog")
        logger.debug("Vrs   = %s", version)
        logger.debug("InLog = %s", uselog)
        if uselog is not None:
            self._splines.set_use_log_energy(_leading_int(uselog) == 1)
        self.state = ReaderState.IN_ROOT

    def _on_start(self, elem: ET.Element) -> None:
        if elem.tag == SPLINE_TAG:
            name = elem.get("name")
            if not name:
                raise _SplineFormatError("<spline> element without a name")
            nknots_text = _attribute(elem, "nknots")
            try:
                nknots = int(nknots_text or "")
            except ValueError as e:
                raise _SplineFormatError(f"Spline {name!r} has invalid nknots: {nknots_text!r}") from e
            if nknots < 0:
                raise _SplineFormatError(f"Spline {name!r} has negative nknots: {nknots}")
            logger.info("Loading spline: %s", name)
            self._buffer = _SplineBuffer(name=name, declared=nknots)
        elif elem.tag == KNOT_TAG and self._buffer is not None:
            self._buffer.energy = None
            self._buffer.xsec = None

    def _on_end(self, elem: ET.Element) -> None:
        buf = self._buffer
        if elem.tag == ENERGY_TAG and buf is not None:
            buf.energy = _parse_float(elem.text, "energy")
        elif elem.tag == XSEC_TAG and buf is not None:
            buf.xsec = _parse_float(elem.text, "cross section")
        elif elem.tag == KNOT_TAG and buf is not None:
            buf.close_knot()
        elif elem.tag == SPLINE_TAG and buf is not None:
            spline = buf.to_spline()
            if buf.name in self.loaded:
                logger.warning("Spline %s appears more than once; keeping the last one", buf.name)
            self._splines.insert(buf.name, spline, initial=True)
            self.loaded.append(buf.name)
            self._buffer = None
            elem.clear()
            if self._root is not None:
                self._root.clear()


def read_spline_list(splines: XSecSplineList, source: str | Path | IO[bytes]) -> XmlParserStatus:
    """Stream a spline list document from a path or binary stream into ``splines``.

    Unlike load_from_xml this never clears the list first.
    """
    reader = SplineListReader(splines)
    try:
        for event, elem in ET.iterparse(source, events=(START, END)):
            reader.handle(event, elem)
    except _InvalidRootError as e:
        logger.error("%s (found <%s>, expected <%s>)", XmlParserStatus.INVALID_ROOT.message, e, ROOT_TAG)
        return XmlParserStatus.INVALID_ROOT
    except (ET.ParseError, _SplineFormatError) as e:
        logger.error("%s: %s", XmlParserStatus.NOT_PARSED.message, e)
        return XmlParserStatus.NOT_PARSED
    except OSError as e:
        logger.error("%s: %s", XmlParserStatus.NOT_FOUND.message, e)
        return XmlParserStatus.NOT_FOUND
    if reader.state is not ReaderState.DONE:
        logger.error("%s: document ended before </%s>", XmlParserStatus.NOT_PARSED.message, ROOT_TAG)
        return XmlParserStatus.NOT_PARSED
    logger.info("Loaded %d splines", len(reader.loaded))
    return XmlParserStatus.OK


def load_from_xml(splines: XSecSplineList, path: str | Path, keep: bool = False) -> XmlParserStatus:
    """Load splines from an XML file.

    Args:
        splines: Spline list to populate.
        path: Spline file to read.
        keep: Keep existing splines and merge the file into them. When False
            the list is cleared once the file has been opened, so a missing
            file leaves it untouched.

    Returns:
        XmlParserStatus.OK, or the reason the load failed.
    """
    in_path = Path(path)
    logger.info("Loading splines from: %s", in_path)
    logger.info("Option to keep pre-existing splines is switched %s", "ON" if keep else "OFF")

    try:
        f = open(in_path, "rb")
    except OSError as e:
        logger.error("%s [filename: %s]: %s", XmlParserStatus.NOT_FOUND.message, in_path, e)
        return XmlParserStatus.NOT_FOUND
    if not keep:
        splines.clear()
    with f:
        status = read_spline_list(splines, f)
    if not status.is_ok:
        logger.error("Failed loading spline file [filename: %s]", in_path)
    return status
