"""
Custom exceptions for the pyp12cert library.
"""

class P12Error(Exception):
    """Base exception class for all pyp12cert errors."""
    pass

class ContainerError(P12Error):
    """Raised when the PKCS#12 container cannot be opened."""
    pass

class MalformedContainerError(ContainerError):
    """
    Raised when the bytes are not a valid PKCS#12/ASN.1 structure.
    """
    pass

DecodeError = MalformedContainerError

class AuthenticationError(ContainerError):
    """
    Raised when the password fails the MAC check or does not decrypt the container.
    """
    pass

class NoCertificateFoundError(P12Error):
    """Raised when the container holds no certificate bag."""
    pass

class NoKeyBagFoundError(P12Error):
    """Raised when the container holds no private key bag."""
    pass

class KeySelectionError(P12Error):
    """
    Raised when an issuer marker requires a key bag that is not present.
    """
    def __init__(self, marker, required):
        self.marker = marker
        self.required = required
        super().__init__(
            f"No key bag with a friendly name containing {required!r} "
            f"(required for issuer {marker!r})"
        )

class KeyDecodeError(P12Error):
    """Raised when a key bag payload is not a usable RSA private key."""
    pass

class ExpiredOrNotYetValidError(P12Error):
    """
    Raised when the signer certificate's validity window excludes the current time.
    """
    def __init__(self, not_valid_before, not_valid_after, checked_at):
        self.not_valid_before = not_valid_before
        self.not_valid_after = not_valid_after
        self.checked_at = checked_at
        super().__init__(
            "Invalid certificate, check the validity "
            f"({not_valid_before.isoformat()} - {not_valid_after.isoformat()}, "
            f"checked at {checked_at.isoformat()})"
        )

class InvalidHexError(P12Error, ValueError):
    """Raised when a codec helper receives a malformed hex string."""
    def __init__(self, value):
        self.value = value
        super().__init__(f"Invalid hex string: {value!r}")
