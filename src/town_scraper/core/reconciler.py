# ABOUTME: Merges parsed observations into one canonical record per town name
# ABOUTME: Field-wise enrichment that never overwrites a present value, finalized once with days remaining

from collections.abc import Iterable

from town_scraper.core.metrics import days_remaining
from town_scraper.core.models import CanonicalRecord, ParsedFields
from town_scraper.utils.logging import get_logger

ENRICHABLE_FIELDS = ("nation", "bank", "upkeep", "location")


def _canonical_order_key(fields: ParsedFields) -> tuple[int, str]:
    return (-fields.completeness, fields.model_dump_json())


class Reconciler:
    """Accumulates parsed observations keyed by trimmed town name.

    A record is created by the first observation carrying a town and is only
    ever filled in afterwards: an incoming value lands in a field only while
    that field is still null.
    """

    def __init__(self):
        self._records: dict[str, CanonicalRecord] = {}
        self._finalized = False
        self.discarded = 0
        self.logger = get_logger(__name__)

    def __len__(self) -> int:
        return len(self._records)

    def merge(self, fields: ParsedFields) -> CanonicalRecord | None:
        """Merge one observation, returning the record it landed in (None if discarded)."""
        if self._finalized:
            raise RuntimeError("Cannot merge into a finalized reconciler")

        key = (fields.town or "").strip()
        if not key:
            self.discarded += 1
            return None

        record = self._records.get(key)
        if record is None:
            record = CanonicalRecord(town=key)
            self._records[key] = record

        for name in ENRICHABLE_FIELDS:
            incoming = getattr(fields, name)
            if incoming is not None and getattr(record, name) is None:
                setattr(record, name, incoming)

        return record

    def finalize(self) -> list[CanonicalRecord]:
        """Compute days remaining for every record (once) and return records sorted by town."""
        if not self._finalized:
            for record in self._records.values():
                record.days_remaining = days_remaining(record.bank, record.upkeep)
            self._finalized = True
            self.logger.debug("Reconciler finalized", records=len(self._records), discarded=self.discarded)

        return [self._records[key] for key in sorted(self._records)]


def reconcile(observations: Iterable[ParsedFields]) -> list[CanonicalRecord]:
    """Merge a batch of parsed observations into finalized canonical records.

    Observations are merged in a canonical order (most complete first, then by
    content) so the result is the same for any arrival order, including when
    two observations disagree on a value.
    """
    reconciler = Reconciler()
    for fields in sorted(observations, key=_canonical_order_key):
        reconciler.merge(fields)
    return reconciler.finalize()
