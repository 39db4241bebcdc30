from __future__ import annotations

import re

_NON_ALNUM = re.compile(r"[\W_]+")


def _norm(s: str) -> str:
    return " ".join(_NON_ALNUM.sub(" ", (s or "").lower()).split())


class KeyComposer:
    """Builds a stable deduplication key for a raw address string."""

    separator = "_"

    def generate_source_key(self, address: str) -> str:
        # "10 Downing St., London" and "10 downing st london" share a key
        return self.separator.join(_norm(address).split())
