"""
Markup Schedule - the constants that turn attar prices into perfume prices.

The default schedule encodes the shop's current markup:
- 5ml perfume   = 3ml attar price
- 15ml perfume  = per-ml(12ml Tola) x 4  + 280
- 30ml perfume  = per-ml(12ml Tola) x 9  + 350
- 50ml perfume  = per-ml(12ml Tola) x 18 + 450
- 100ml perfume = per-ml(12ml Tola) x 38 + 500

A CSV with columns ``slot, anchor, divisor, multiplier, offset`` replaces
the whole schedule, so the markup can change without touching the formula.
"""
import math
from dataclasses import dataclass
from pathlib import Path

import pandas as pd

from .models import SlotRule


SMALL_ANCHOR = "3ml"
BASE_ANCHOR = "12ml ( Tola )"
BASE_ANCHOR_UNITS = 12

SCHEDULE_COLUMNS = ['slot', 'anchor', 'divisor', 'multiplier', 'offset']


@dataclass(frozen=True)
class MarkupSchedule:
    """Ordered slot rules; output slots appear in this order."""
    rules: tuple[SlotRule, ...]

    def __post_init__(self):
        labels = [rule.label for rule in self.rules]
        if not labels:
            raise ValueError("Markup schedule needs at least one slot")
        if len(set(labels)) != len(labels):
            raise ValueError(f"Duplicate slot labels in markup schedule: {labels}")
        for rule in self.rules:
            if not rule.anchor.strip():
                raise ValueError(f"Slot '{rule.label}' has no anchor label")
            if not rule.divisor or not math.isfinite(rule.divisor):
                raise ValueError(f"Slot '{rule.label}' needs a non-zero divisor")

    @property
    def labels(self) -> tuple[str, ...]:
        return tuple(rule.label for rule in self.rules)

    @property
    def anchors(self) -> tuple[str, ...]:
        """Distinct anchor labels, in first-use order."""
        return tuple(dict.fromkeys(rule.anchor for rule in self.rules))

    @classmethod
    def from_frame(cls, df: pd.DataFrame) -> 'MarkupSchedule':
        """Build a schedule from a DataFrame with SCHEDULE_COLUMNS."""
        missing = [c for c in SCHEDULE_COLUMNS if c not in df.columns]
        if missing:
            raise ValueError(f"Markup schedule is missing columns: {', '.join(missing)}")

        rules = []
        for idx, row in df.iterrows():
            try:
                rules.append(SlotRule(
                    label=str(row['slot']).strip(),
                    anchor=str(row['anchor']).strip(),
                    divisor=float(row['divisor']),
                    multiplier=float(row['multiplier']),
                    offset=float(row['offset']),
                ))
            except (TypeError, ValueError) as e:
                raise ValueError(f"Invalid markup schedule row {idx + 1}: {e}") from e
        return cls(rules=tuple(rules))

    @classmethod
    def from_csv(cls, path: Path) -> 'MarkupSchedule':
        """Load a schedule override from CSV."""
        df = pd.read_csv(path, dtype=str, keep_default_na=False)
        df.columns = [c.strip().lower() for c in df.columns]
        return cls.from_frame(df)

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            [[r.label, r.anchor, r.divisor, r.multiplier, r.offset] for r in self.rules],
            columns=SCHEDULE_COLUMNS,
        )


DEFAULT_SCHEDULE = MarkupSchedule(rules=(
    SlotRule("5ml", SMALL_ANCHOR),
    SlotRule("15ml", BASE_ANCHOR, divisor=BASE_ANCHOR_UNITS, multiplier=4, offset=280),
    SlotRule("30ml", BASE_ANCHOR, divisor=BASE_ANCHOR_UNITS, multiplier=9, offset=350),
    SlotRule("50ml", BASE_ANCHOR, divisor=BASE_ANCHOR_UNITS, multiplier=18, offset=450),
    SlotRule("100ml", BASE_ANCHOR, divisor=BASE_ANCHOR_UNITS, multiplier=38, offset=500),
))
