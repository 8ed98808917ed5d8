"""Port interfaces for dependency inversion"""
from .outbound.price_feed import IPriceFeed
from .outbound.cargo_repository import ICargoRepository

__all__ = ['IPriceFeed', 'ICargoRepository']
