from __future__ import annotations

import logging
import re

from ..models import OptionArgs, OptionSet

logger = logging.getLogger(__name__)

_OPTION_PATTERN = re.compile(r"(\w+)(?:\(([\w,.]+)\))?")


def parse_options(text: str) -> OptionSet:
    """Parse a raw suffix such as ``-quadrant(T)-resize`` into an :class:`OptionSet`.

    Fragments that are not ``name`` or ``name(arg,...)`` are dropped. When a
    name repeats, the last fragment wins.
    """

    options: dict[str, OptionArgs] = {}
    for fragment in (text or "").split("-"):
        if not fragment:
            continue
        match = _OPTION_PATTERN.fullmatch(fragment)
        if not match:
            logger.warning("Ignoring malformed option fragment %r", fragment)
            continue
        name, raw_args = match.group(1), match.group(2)
        options.pop(name, None)
        options[name] = tuple(raw_args.split(",")) if raw_args is not None else None
    return OptionSet(options)
