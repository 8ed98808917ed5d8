class DomainException(Exception):
    """Base exception for all domain errors"""
    pass

class InvalidParamsError(DomainException):
    """Raised when valuation or profitability inputs are out of range"""
    pass

class SubtractBeyondHeldError(DomainException):
    """Raised when subtracting cargo for a commodity that is not held"""

    def __init__(self, commodity_id: str, delta_scu: float):
        self.commodity_id = commodity_id
        self.delta_scu = delta_scu
        super().__init__(
            f"Cannot subtract {abs(delta_scu):g} SCU because {commodity_id} is not in the cargo set"
        )

class PriceFeedError(DomainException):
    """Raised when the upstream price feed fails or returns an error payload"""
    pass
