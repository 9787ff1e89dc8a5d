# File: site_audit/inventory_diff.py
"""site_audit.inventory_diff: Сравнение URL-инвентарей эталонного и нового сайта.

Ключ сравнения - ``normalized_path``. ``missing`` - пути, которые есть на эталоне,
но отсутствуют на кандидате; ``extra`` - новые пути кандидата. Результат носит
справочный характер и на код выхода не влияет.
"""

from __future__ import annotations

from typing import Dict, List

from site_audit.logger import logger
from site_audit.models import InventoryDiff, UrlEntry, UrlInventory
from site_audit.urls import UrlCategory

__all__ = ["diff_inventories", "CONTENT_CATEGORIES"]

#: Categories whose complete absence on the candidate is reported as a change.
CONTENT_CATEGORIES = (UrlCategory.BLOG, UrlCategory.NEWS)


def _missing_order(entry: UrlEntry) -> tuple:
    return (-(entry.priority or 0.0), entry.category.value, entry.normalized_path)


def _bump(by_category: Dict[str, Dict[str, int]], category: UrlCategory, key: str) -> None:
    counts = by_category.setdefault(category.value, {"missing": 0, "extra": 0})
    counts[key] += 1


def diff_inventories(reference: UrlInventory, candidate: UrlInventory) -> InventoryDiff:
    """Compare *reference* and *candidate* by normalized path."""
    ref_paths = {entry.normalized_path: entry for entry in reference.entries}
    cand_paths = {entry.normalized_path: entry for entry in candidate.entries}
    by_category: Dict[str, Dict[str, int]] = {}

    missing = [entry for path, entry in ref_paths.items() if path not in cand_paths]
    extra = [entry for path, entry in cand_paths.items() if path not in ref_paths]
    for entry in missing:
        _bump(by_category, entry.category, "missing")
    for entry in extra:
        _bump(by_category, entry.category, "extra")

    changed: List[str] = []
    ref_counts, cand_counts = reference.counts, candidate.counts
    for category in CONTENT_CATEGORIES:
        on_reference = ref_counts.get(category.value, 0)
        if on_reference and not cand_counts.get(category.value, 0):
            changed.append(
                f"No {category.value} URLs on candidate, {on_reference} on reference"
            )

    diff = InventoryDiff(
        reference_total=len(reference),
        candidate_total=len(candidate),
        missing=sorted(missing, key=_missing_order),
        extra=sorted(extra, key=lambda e: e.normalized_path),
        changed=changed,
        by_category=dict(sorted(by_category.items())),
    )
    logger.info(
        "Inventory diff: %d reference URL(s), %d candidate URL(s), %d missing, %d extra",
        diff.reference_total, diff.candidate_total, len(diff.missing), len(diff.extra),
    )
    return diff
