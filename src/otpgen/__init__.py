import time
from typing import Callable, Union

from . import utils
from .algorithm import HMACAlgorithm as HMACAlgorithm
from .compat import random
from .exceptions import GenerationFailed as GenerationFailed
from .exceptions import InvalidArgument as InvalidArgument
from .exceptions import MalformedURI as MalformedURI
from .exceptions import OTPError as OTPError
from .hotp import HOTP as HOTP
from .otp import OTPParameters as OTPParameters
from .otp import compute_code as compute_code
from .totp import TOTP as TOTP


def random_secret(length: int = 20) -> bytes:
    """
    Returns ``length`` random bytes to use as a raw HMAC key.
    """
    if length < 16:
        raise InvalidArgument("Secrets should be at least 128 bits")
    return bytes(random.getrandbits(8) for _ in range(length))


def random_base32(length: int = 20) -> str:
    """
    Returns a random secret of ``length`` bytes, encoded the way the ``secret``
    URI parameter carries it. Decode it with ``utils.base32_decode`` to get
    the key for a generator.
    """
    return utils.base32_encode(random_secret(length))


def parse_uri(uri: str, clock: Callable[[], float] = time.time) -> Union[HOTP, TOTP]:
    """
    Parses the provisioning URI for the OTP; works for either TOTP or HOTP.

    See also:
        https://github.com/google/google-authenticator/wiki/Key-Uri-Format

    :param uri: the hotp/totp URI to parse
    :param clock: time source handed to TOTP generators
    :returns: HOTP or TOTP object
    :raises MalformedURI: if the URI is not an otpauth URI
    :raises InvalidArgument: if the type or a parameter is not supported
    """
    scheme, otp_type, _ = utils.split_uri(uri)
    if scheme != "otpauth":
        raise MalformedURI("Not an otpauth URI")
    if otp_type == TOTP.OTP_TYPE:
        return TOTP.from_otpauth_uri(uri, clock=clock)
    elif otp_type == HOTP.OTP_TYPE:
        return HOTP.from_otpauth_uri(uri)
    raise InvalidArgument("Not a supported OTP type")
