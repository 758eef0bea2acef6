"""Region module for sensor layouts and per-region aggregation."""

from graphene_trace.regions.layout import RegionLayout
from graphene_trace.regions.mapper import RegionMapper, AGGREGATIONS, get_aggregation

__all__ = [
    "RegionLayout",
    "RegionMapper",
    "AGGREGATIONS",
    "get_aggregation",
]
