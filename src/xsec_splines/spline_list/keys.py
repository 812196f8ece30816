"""Spline keys: deterministic string identity for (algorithm, interaction) pairs."""

from __future__ import annotations

import logging

from xsec_splines.interaction import CrossSectionAlgorithm, InteractionLike

logger = logging.getLogger(__name__)

KEY_DELIMITER = "/"


def build_spline_key(
    algorithm: CrossSectionAlgorithm | None,
    interaction: InteractionLike | None,
) -> str:
    """Build the cache key ``<alg name>/<alg config>/<interaction string>``.

    Returns an empty string (and logs a warning) when either input is absent.
    """
    if algorithm is None:
        logger.warning("Null cross-section algorithm - returning empty spline key")
        return ""
    if interaction is None:
        logger.warning("Null interaction - returning empty spline key")
        return ""

    alg_id = algorithm.id
    return KEY_DELIMITER.join((alg_id.name, alg_id.config, interaction.as_string()))


def split_spline_key(key: str) -> tuple[str, str, str]:
    """Split a key into (algorithm name, algorithm config, interaction string).

    The interaction string may itself contain the delimiter, so only the first
    two delimiters are significant.

    Raises:
        ValueError: If the key does not contain an algorithm name and config.
    """
    parts = key.split(KEY_DELIMITER, 2)
    if len(parts) != 3 or not parts[0]:
        raise ValueError(f"Malformed spline key: {key!r}")
    return parts[0], parts[1], parts[2]
