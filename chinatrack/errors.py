"""
ChinaTrack errors.

Every failure a caller can display inline derives from ChinaTrackError.
The HTTP layer maps each class to a status code; nothing here is fatal
to the process.
"""


class ChinaTrackError(Exception):
    """Base class for all ChinaTrack errors"""
    pass


class ConfigError(ChinaTrackError):
    """Raised when the configuration is missing a required value"""
    pass


class ValidationError(ChinaTrackError):
    """Raised when caller input is empty or malformed"""
    pass


# -- Shipments --

class DuplicateActiveError(ChinaTrackError):
    """Tracking number already present among active shipments"""

    def __init__(self, tracking_number: str):
        self.tracking_number = tracking_number
        super().__init__(f"Tracking number {tracking_number} already exists in your list.")


class DuplicateTrashedError(ChinaTrackError):
    """Tracking number present in the trash; the user should restore it instead"""

    def __init__(self, tracking_number: str):
        self.tracking_number = tracking_number
        super().__init__(
            f"Tracking number {tracking_number} is in the trash. Restore it instead of adding it again."
        )


class UnknownCarrierError(ValidationError):
    """Carrier code is not in the supported catalogue"""

    def __init__(self, carrier_code: str):
        self.carrier_code = carrier_code
        super().__init__(f"Unsupported carrier: {carrier_code}")


class ShipmentNotFoundError(ChinaTrackError):
    """No shipment with the given id in the expected state"""

    def __init__(self, shipment_id: str):
        self.shipment_id = shipment_id
        super().__init__(f"Shipment not found: {shipment_id}")


class TrackingLookupError(ChinaTrackError):
    """Network or service failure while fetching tracking status"""
    pass


# -- Users --

class RegistrationDisabledError(ChinaTrackError):
    def __init__(self):
        super().__init__("Registration is currently disabled by administrator.")


class EmailExistsError(ChinaTrackError):
    def __init__(self, email: str):
        self.email = email
        super().__init__("Email already exists.")


class InvalidCredentialsError(ChinaTrackError):
    def __init__(self):
        super().__init__("Invalid email or password.")


class NotAuthenticatedError(ChinaTrackError):
    def __init__(self):
        super().__init__("Please sign in first.")


class PermissionDeniedError(ChinaTrackError):
    def __init__(self, action: str = "this action"):
        super().__init__(f"Admin role required for {action}.")
