"""
Weighted distribution of portfolio value across classification buckets.

A resolver maps each holding to zero or more buckets. A holding in N buckets
contributes 1/N of its value and quantity to each, so multi-valued
dimensions never count a card twice.
"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence

from cardvault.schemas import DistributionSlice, PortfolioDistributions, PortfolioHolding, SetDistributionItem
from cardvault.services.portfolio.constants import (
    COLOR_LABELS,
    OTHER_KEY,
    OTHER_LABEL,
    PortfolioAnalyticsConfig,
    RARITY_TIERS,
)
from cardvault.services.portfolio.inputs import LedgerEntry
from cardvault.services.portfolio.series import round_currency


@dataclass(frozen=True)
class BucketDescriptor:
    key: str
    label: str


BucketResolver = Callable[[PortfolioHolding, LedgerEntry], Sequence[BucketDescriptor]]


@dataclass
class _Bucket:
    label: str
    total_value: float = 0.0
    quantity: float = 0.0


def aggregate_distribution(
    holdings: Sequence[PortfolioHolding],
    entries: Sequence[LedgerEntry],
    resolver: BucketResolver,
    total_value: float,
    limit: int = PortfolioAnalyticsConfig.DISTRIBUTION_LIMIT,
) -> List[DistributionSlice]:
    """
    Accumulate holdings into the buckets returned by resolver.

    Args:
        holdings: Priced holdings, parallel to entries
        entries: Ledger entries the holdings were projected from
        resolver: Maps a (holding, entry) pair to its buckets
        total_value: Portfolio value the percentages are taken against
        limit: Number of largest slices to keep

    Returns:
        Slices sorted by value, largest first
    """
    buckets: Dict[str, _Bucket] = {}

    for holding, entry in zip(holdings, entries):
        descriptors = resolver(holding, entry)
        if not descriptors:
            continue
        weight = 1 / len(descriptors)
        for descriptor in descriptors:
            bucket = buckets.setdefault(descriptor.key, _Bucket(label=descriptor.label))
            bucket.total_value += holding.total_value * weight
            bucket.quantity += holding.quantity * weight

    slices = [
        DistributionSlice(
            key=key,
            label=bucket.label,
            total_value=round_currency(bucket.total_value),
            quantity=round_currency(bucket.quantity),
            percentage=round_currency(bucket.total_value / total_value * 100) if total_value > 0 else 0.0,
            average_price=round_currency(bucket.total_value / bucket.quantity) if bucket.quantity > 0 else 0.0,
        )
        for key, bucket in buckets.items()
    ]
    slices.sort(key=lambda item: (-item.total_value, item.key))
    return slices[:limit]


def normalize_rarity(rarity: Optional[str]) -> Optional[str]:
    """Map a catalog rarity onto the fixed tiers, None for anything else."""
    if not rarity:
        return None
    value = rarity.strip().lower()
    return value if value in RARITY_TIERS else None


def _label(key: str) -> str:
    return key.capitalize()


def resolve_set(holding: PortfolioHolding, entry: LedgerEntry) -> List[BucketDescriptor]:
    set_code = holding.set_code.upper()
    return [BucketDescriptor(key=set_code, label=set_code)]


def resolve_finish(holding: PortfolioHolding, entry: LedgerEntry) -> List[BucketDescriptor]:
    return [BucketDescriptor(key=holding.finish, label=_label(holding.finish))]


def resolve_color(holding: PortfolioHolding, entry: LedgerEntry) -> List[BucketDescriptor]:
    bucket = holding.primary_color_bucket
    return [BucketDescriptor(key=bucket, label=COLOR_LABELS.get(bucket, bucket))]


def resolve_format(holding: PortfolioHolding, entry: LedgerEntry) -> List[BucketDescriptor]:
    if not holding.primary_format:
        return [BucketDescriptor(key=OTHER_KEY, label=OTHER_LABEL)]
    return [BucketDescriptor(key=holding.primary_format, label=_label(holding.primary_format))]


def resolve_rarity(holding: PortfolioHolding, entry: LedgerEntry) -> List[BucketDescriptor]:
    tier = normalize_rarity(holding.rarity)
    if tier is None:
        return [BucketDescriptor(key=OTHER_KEY, label=OTHER_LABEL)]
    return [BucketDescriptor(key=tier, label=_label(tier))]


DIMENSION_RESOLVERS: Dict[str, BucketResolver] = {
    "set": resolve_set,
    "finish": resolve_finish,
    "color_identity": resolve_color,
    "format": resolve_format,
    "rarity": resolve_rarity,
}


def build_distributions(
    holdings: Sequence[PortfolioHolding],
    entries: Sequence[LedgerEntry],
    total_value: float,
) -> PortfolioDistributions:
    return PortfolioDistributions(
        **{
            dimension: aggregate_distribution(holdings, entries, resolver, total_value)
            for dimension, resolver in DIMENSION_RESOLVERS.items()
        }
    )


def set_distribution_items(distributions: PortfolioDistributions) -> List[SetDistributionItem]:
    """Compact by-set view kept for clients that predate the distributions block."""
    return [
        SetDistributionItem(set_code=item.key, total_value=item.total_value, percentage=item.percentage)
        for item in distributions.set
    ]
