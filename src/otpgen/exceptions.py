class OTPError(Exception):
    """Base error for one-time password generation."""
    pass


class InvalidArgument(OTPError, ValueError):
    """A generator option, URI parameter or counter is invalid."""
    pass


class MalformedURI(OTPError, ValueError):
    """A provisioning URI could not be built or parsed."""
    pass


class GenerationFailed(OTPError):
    """The HMAC primitive failed to produce a digest."""
    pass
