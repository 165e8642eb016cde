import hmac
import logging
from typing import Any, Dict, Mapping, Optional, Union

from . import utils
from .algorithm import HMACAlgorithm
from .exceptions import GenerationFailed, InvalidArgument

logger = logging.getLogger(__name__)

DEFAULT_PASSWORD_LENGTH = 6
MIN_PASSWORD_LENGTH = 6
MAX_PASSWORD_LENGTH = 8

MAX_COUNTER = 2**64 - 1


def hmac_digest(algorithm: HMACAlgorithm, key: bytes, message: bytes) -> bytes:
    """
    HMAC primitive used by every generator.
    """
    return hmac.new(key, message, algorithm.hash_function).digest()


def int_to_bytestring(i: int, padding: int = 8) -> bytes:
    """
    Turns an integer to the OATH specified
    bytestring, which is fed to the HMAC
    along with the secret
    """
    return i.to_bytes(padding, "big")


def truncate(digest: bytes) -> int:
    """
    Dynamic truncation from RFC 4226 section 5.3.

    The low nibble of the last byte picks an offset, the four bytes found there
    are read big-endian with the top bit cleared.
    """
    offset = digest[-1] & 0xF
    return (
        (digest[offset] & 0x7F) << 24
        | (digest[offset + 1] & 0xFF) << 16
        | (digest[offset + 2] & 0xFF) << 8
        | (digest[offset + 3] & 0xFF)
    )


def check_counter(counter: int) -> int:
    """
    :raises InvalidArgument: if counter is not an unsigned 64-bit integer
    """
    if isinstance(counter, bool) or not isinstance(counter, int):
        raise InvalidArgument("counter must be an integer")
    if counter < 0 or counter > MAX_COUNTER:
        raise InvalidArgument("counter must be between 0 and 2^64 - 1")
    return counter


def compute_code(secret: bytes, counter: int, algorithm: HMACAlgorithm, password_length: int) -> str:
    """
    Computes the HOTP value of ``counter``; TOTP feeds it a time step instead.

    :param secret: raw HMAC key
    :param counter: unsigned 64-bit moving factor
    :param algorithm: hash used in the HMAC
    :param password_length: number of decimal digits in the result
    :returns: the code, left-padded with zeros to ``password_length`` digits
    :raises InvalidArgument: if counter is not an unsigned 64-bit integer
    :raises GenerationFailed: if the HMAC primitive fails
    """
    check_counter(counter)

    try:
        digest = hmac_digest(algorithm, secret, int_to_bytestring(counter))
    except Exception as e:
        logger.warning("HMAC-%s computation failed: %s", algorithm.name, type(e).__name__)
        raise GenerationFailed("Could not compute HMAC-{}".format(algorithm.name)) from e

    code = truncate(digest) % 10**password_length
    return str(code).rjust(password_length, "0")


def build_label(issuer: str, account: str = "") -> str:
    return "{}:{}".format(issuer, account) if account else issuer


class OTPParameters(object):
    """
    Secret, algorithm and password length shared by HOTP and TOTP generators.

    All options are validated together when the object is created; it cannot
    be changed afterwards.
    """

    __slots__ = ("_secret", "_algorithm", "_password_length")

    def __init__(
        self,
        secret: bytes,
        password_length: int = DEFAULT_PASSWORD_LENGTH,
        algorithm: Union[HMACAlgorithm, str] = HMACAlgorithm.SHA1,
    ) -> None:
        """
        :param secret: raw HMAC key, must not be empty
        :param password_length: number of digits in generated codes, 6 to 8
        :param algorithm: an ``HMACAlgorithm`` or its URI spelling
        :raises InvalidArgument: when any option is invalid
        """
        if not isinstance(secret, (bytes, bytearray, memoryview)):
            raise InvalidArgument("Secret must be bytes")
        if len(secret) == 0:
            raise InvalidArgument("Secret must not be empty")
        if isinstance(password_length, bool) or not isinstance(password_length, int):
            raise InvalidArgument("Password length must be an integer")
        if not MIN_PASSWORD_LENGTH <= password_length <= MAX_PASSWORD_LENGTH:
            raise InvalidArgument(
                "Password length must be between {} and {} digits".format(MIN_PASSWORD_LENGTH, MAX_PASSWORD_LENGTH)
            )
        if not isinstance(algorithm, HMACAlgorithm):
            algorithm = HMACAlgorithm.parse(algorithm)

        self._secret = bytes(secret)
        self._password_length = password_length
        self._algorithm = algorithm

    @property
    def secret(self) -> bytes:
        return self._secret

    @property
    def password_length(self) -> int:
        return self._password_length

    @property
    def algorithm(self) -> HMACAlgorithm:
        return self._algorithm

    def generate_code(self, counter: int) -> str:
        return compute_code(self._secret, counter, self._algorithm, self._password_length)

    def verify_code(self, code: str, counter: int, delay_window: int = 0) -> bool:
        """
        Checks ``code`` against every counter within ``delay_window`` of ``counter``.

        Candidates outside ``[0, 2^64 - 1]`` are skipped.

        :raises InvalidArgument: if counter is out of range or the window is negative
        """
        check_counter(counter)
        if isinstance(delay_window, bool) or not isinstance(delay_window, int) or delay_window < 0:
            raise InvalidArgument("delay_window must be a non-negative integer")
        first = max(0, counter - delay_window)
        last = min(MAX_COUNTER, counter + delay_window)
        for candidate in range(first, last + 1):
            if utils.strings_equal(str(code), self.generate_code(candidate)):
                return True
        return False

    def provisioning_uri(self, otp_type: str, label: str, extra_query: Optional[Mapping[str, Any]] = None) -> str:
        """
        Builds an otpauth URI carrying these parameters.

        The secret is sent as unpadded base32, which is what authenticator
        apps expect.

        :param otp_type: ``hotp`` or ``totp``
        :param label: ``issuer`` or ``issuer:account``, not yet encoded
        :param extra_query: type specific parameters such as counter or period
        :raises MalformedURI: when the URI cannot be assembled
        """
        query: Dict[str, Any] = dict(extra_query or {})
        query["secret"] = utils.base32_encode(self._secret)
        query["algorithm"] = self._algorithm.name
        query["digits"] = self._password_length
        return utils.build_uri(otp_type, label, query)

    @classmethod
    def from_query(cls, query: Mapping[str, str]) -> "OTPParameters":
        """
        Reads secret, digits and algorithm from decoded URI query parameters.

        :raises InvalidArgument: if secret is missing or a value is invalid
        """
        secret = query.get("secret")
        if not secret:
            raise InvalidArgument("Secret query parameter must be set")

        options: Dict[str, Any] = {}
        digits = query.get("digits")
        if digits is not None:
            options["password_length"] = parse_int(digits, "digits")
        algorithm = query.get("algorithm")
        if algorithm is not None:
            options["algorithm"] = HMACAlgorithm.parse(algorithm)

        return cls(utils.base32_decode(secret), **options)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, OTPParameters):
            return NotImplemented
        return (
            hmac.compare_digest(self._secret, other._secret)
            and self._algorithm is other._algorithm
            and self._password_length == other._password_length
        )

    def __hash__(self) -> int:
        return hash((self._secret, self._algorithm, self._password_length))

    def __repr__(self) -> str:
        return "OTPParameters(password_length={}, algorithm={})".format(self._password_length, self._algorithm.name)


def parse_int(value: str, name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise InvalidArgument("{} must be an integer, got {!r}".format(name, value)) from e
