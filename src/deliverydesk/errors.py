"""Error taxonomy shared by repositories, services and routes."""

from __future__ import annotations


class DeliveryDeskError(Exception):
    """Base class for application errors."""


class MissingConfigurationError(DeliveryDeskError):
    """Startup configuration is incomplete; the application cannot start."""


class AuthorizationError(DeliveryDeskError):
    """A mutating action was attempted without an authenticated actor."""


class RemoteStoreError(DeliveryDeskError):
    """The hosted data service rejected or failed a request."""


class NotFoundError(DeliveryDeskError):
    """A record with the requested id is not in the cached list."""


class PostalCodeError(DeliveryDeskError):
    """The postal code is malformed or unknown to the lookup service."""


class BoardMoveError(DeliveryDeskError):
    """A drag-and-drop status change could not be persisted and was reverted."""
