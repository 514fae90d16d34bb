"""Entity-count coupling between the registry and the rendering program.

The rendering program declares its scene arrays with compile-time sizes.
Its source carries placeholders that are replaced with the registry's
live counts before compilation, and the integration layer verifies the
declared sizes against the counts before every upload.
"""

from __future__ import annotations

import logging
import re
from typing import Mapping

from scene_registry.registry import EntityCounts

logger = logging.getLogger(__name__)

PLACEHOLDERS: dict[str, str] = {
    "materials": "__NUM_MATERIALS__",
    "spheres": "__NUM_SPHERES__",
    "planes": "__NUM_PLANES__",
    "triangles": "__NUM_TRIANGLES__",
}

_ANY_PLACEHOLDER = re.compile(r"__NUM_[A-Z_]+__")


def inject_entity_counts(source: str, counts: EntityCounts) -> str:
    """Replace the count placeholders in a program source.

    Parameters
    ----------
    source : str
        Program source text.
    counts : EntityCounts
        Live registry counts.

    Returns
    -------
    str
        Source with every known placeholder replaced.

    Raises
    ------
    ValueError
        If an unknown ``__NUM_*__`` placeholder remains after substitution.
    """
    values = counts.as_dict()
    for kind, placeholder in PLACEHOLDERS.items():
        if placeholder not in source:
            logger.warning("Program source declares no %s array (%s)", kind, placeholder)
            continue
        source = source.replace(placeholder, str(values[kind]))

    leftover = sorted(set(_ANY_PLACEHOLDER.findall(source)))
    if leftover:
        raise ValueError(f"Unresolved count placeholders in program source: {leftover}")

    logger.debug("Injected entity counts: %s", values)
    return source


def verify_declared_counts(declared: Mapping[str, int], counts: EntityCounts) -> None:
    """Assert that the program's declared array sizes equal the live counts.

    Parameters
    ----------
    declared : Mapping[str, int]
        Sizes compiled into the program, keyed by record kind
        ('materials', 'spheres', 'planes', 'triangles').
    counts : EntityCounts
        Live registry counts.

    Raises
    ------
    ValueError
        Listing every kind whose declared size differs (a missing kind is
        a mismatch).
    """
    live = counts.as_dict()
    mismatches = [
        f"{kind}: declared {declared.get(kind)}, registry has {n}"
        for kind, n in live.items()
        if declared.get(kind) != n
    ]
    if mismatches:
        raise ValueError("Entity count mismatch with program: " + "; ".join(mismatches))
