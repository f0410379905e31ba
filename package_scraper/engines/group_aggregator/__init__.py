"""Group aggregator engine: merge project reports into version buckets."""

from package_scraper.engines.group_aggregator.aggregator import (
    GroupAggregator,
    aggregate_group,
)
from package_scraper.engines.group_aggregator.latest import (
    LatestVersionCache,
    NpmViewLookup,
    NullLookup,
    RegistryLookup,
)
from package_scraper.engines.group_aggregator.models import (
    CombinedReport,
    GroupReport,
    combined_to_dict,
)

__all__ = [
    "CombinedReport",
    "GroupAggregator",
    "GroupReport",
    "LatestVersionCache",
    "NpmViewLookup",
    "NullLookup",
    "RegistryLookup",
    "aggregate_group",
    "combined_to_dict",
]
