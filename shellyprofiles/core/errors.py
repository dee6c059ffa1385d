"""Domain-specific errors for shellyprofiles."""


class ShellyProfilesError(Exception):
    """Base error for shellyprofiles."""


class ProfileNotFoundError(ShellyProfilesError, LookupError):
    """Raised when a model that must be registered is missing from the registry."""


class CatalogLoadError(ShellyProfilesError):
    """Raised when reading catalog sources fails."""


class CatalogValidationError(ShellyProfilesError):
    """Raised when a catalog file does not conform to schema or semantics."""


class ProfileQueryError(ShellyProfilesError):
    """Raised when a capability/component request names unknown fields."""
