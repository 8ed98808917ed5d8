"""Ranking domain - penalty-adjusted sell location ranking"""

from .services import (
    BestOverall,
    BestPriceSummary,
    CommodityRanking,
    PenaltyConfig,
    PenaltyFlag,
    RankedLocation,
    location_penalty,
    rank_cargo,
    rank_locations
)

__all__ = [
    'BestOverall',
    'BestPriceSummary',
    'CommodityRanking',
    'PenaltyConfig',
    'PenaltyFlag',
    'RankedLocation',
    'location_penalty',
    'rank_cargo',
    'rank_locations',
]
