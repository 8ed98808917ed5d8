"""Valuation domain - confidence, expected value and profitability"""

from .confidence import ConfidenceScorer, age_factor, volatility_factor
from .evaluation import CargoEvaluation, PortfolioEvaluation, evaluate_item, evaluate_portfolio
from .profitability import (
    ProfitBand,
    ProfitabilityParams,
    ProfitabilityScore,
    ProfitThresholds,
    score_profitability
)

__all__ = [
    'ConfidenceScorer',
    'age_factor',
    'volatility_factor',
    'CargoEvaluation',
    'PortfolioEvaluation',
    'evaluate_item',
    'evaluate_portfolio',
    'ProfitBand',
    'ProfitabilityParams',
    'ProfitabilityScore',
    'ProfitThresholds',
    'score_profitability',
]
