"""Domain-specific errors for vierabridge."""


class VieraBridgeError(Exception):
    """Base error for vierabridge."""


class DeclarationError(VieraBridgeError):
    """Raised when a configured device entry is malformed."""


class ReachabilityError(VieraBridgeError):
    """Raised when a device is offline and no usable cached data exists."""


class EncryptionEligibilityError(VieraBridgeError):
    """Raised when an encrypted model cannot be set up with what we have."""


class HandshakeError(VieraBridgeError):
    """Raised when session negotiation with an encrypted model fails."""


class BootstrapError(VieraBridgeError):
    """Raised when the first-ever setup of a device cannot complete."""


class ConfigLoadError(VieraBridgeError):
    """Raised when reading the configuration file fails."""


class ConfigValidationError(VieraBridgeError):
    """Raised when the configuration file does not conform to schema."""


class CacheWriteError(VieraBridgeError):
    """Raised when the accessory cache cannot be flushed to disk."""


class TransportError(VieraBridgeError):
    """Base transport error."""
