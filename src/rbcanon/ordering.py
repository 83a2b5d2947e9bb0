from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from rbcanon.keys import is_shorthand, key
from rbcanon.nodes import Entry


@dataclass(frozen=True)
class OrderingPolicy:
    shorthands_first: bool = False

    def sort_key(self, entry: Entry) -> tuple[int, str]:
        bucket = 0 if self.shorthands_first and is_shorthand(entry) else 1
        return bucket, key(entry) or ""

    def canonical_order(self, entries: Sequence[Entry]) -> list[int]:
        """Permutation of indices placing ``entries`` in canonical order."""
        return sorted(range(len(entries)), key=lambda index: self.sort_key(entries[index]))

    def is_canonical(self, entries: Sequence[Entry]) -> bool:
        order = self.canonical_order(entries)
        return order == list(range(len(entries)))


ALPHABETICAL = OrderingPolicy()
