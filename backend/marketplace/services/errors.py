class MarketplaceError(ValueError):
    """Base class for user-visible marketplace errors."""


class MarketplaceValidationError(MarketplaceError):
    pass


class MarketplaceNotFoundError(MarketplaceError):
    pass


class MarketplaceStateError(MarketplaceError):
    """The record exists but its status does not allow the requested operation."""


class MarketplaceAvailabilityError(MarketplaceError):
    pass
