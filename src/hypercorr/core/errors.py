"""Exception hierarchy for the correlation service."""


class HyperCorrError(Exception):
    """Base class for errors raised by this package."""


class MarketDataError(HyperCorrError):
    """The market-data provider could not supply a required payload."""
