"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidCoordinatesError(DomainException):
    """Latitude/longitude are not finite or out of range"""

    pass


class LocationStoreError(DomainException):
    """Location store query failed or is unavailable"""

    pass


class PreferenceLookupError(DomainException):
    """User notification preferences could not be read"""

    pass


class NotificationDispatchError(DomainException):
    """Push notification service returned an error or is unavailable"""

    pass


class InvalidSubscriptionError(DomainException):
    """Tracking subscription parameters are out of range"""

    pass
