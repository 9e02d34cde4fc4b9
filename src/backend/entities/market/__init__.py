"""Market data client.

Usage:
    from entities.market import PriceFetcher, format_for_display
"""

from .prices import NO_PRICE_DATA, PriceFetcher, format_for_display

__all__ = ["NO_PRICE_DATA", "PriceFetcher", "format_for_display"]
