import logging
from typing import Any, Dict, Union

from . import utils
from .algorithm import HMACAlgorithm
from .exceptions import InvalidArgument, MalformedURI
from .otp import DEFAULT_PASSWORD_LENGTH, OTPParameters, build_label, check_counter, parse_int

logger = logging.getLogger(__name__)


class HOTP(object):
    """
    Handler for HMAC-based OTP counters.
    """

    OTP_TYPE = "hotp"

    def __init__(
        self,
        secret: bytes,
        password_length: int = DEFAULT_PASSWORD_LENGTH,
        algorithm: Union[HMACAlgorithm, str] = HMACAlgorithm.SHA1,
    ) -> None:
        """
        :param secret: raw HMAC key
        :param password_length: number of digits in the OTP, 6 to 8
        :param algorithm: digest function to use in the HMAC (expected to be SHA1)
        :raises InvalidArgument: when any option is invalid
        """
        self._parameters = OTPParameters(secret, password_length=password_length, algorithm=algorithm)

    @classmethod
    def with_default_values(cls, secret: bytes) -> "HOTP":
        return cls(secret)

    @classmethod
    def from_parameters(cls, parameters: OTPParameters) -> "HOTP":
        hotp = cls.__new__(cls)
        hotp._parameters = parameters
        return hotp

    @classmethod
    def from_otpauth_uri(cls, uri: str) -> "HOTP":
        """
        Rebuilds a generator from a provisioning URI.

        The ``counter`` parameter is checked but not kept: the counter is passed
        to every :meth:`generate` call instead.

        :param uri: ``otpauth://hotp/...`` URI
        :raises MalformedURI: if the URI cannot be parsed
        :raises InvalidArgument: if it is not a HOTP URI or a parameter is invalid
        """
        scheme, otp_type, _ = utils.split_uri(uri)
        if scheme != "otpauth":
            raise MalformedURI("Not an otpauth URI")
        if otp_type != cls.OTP_TYPE:
            raise InvalidArgument("Expected a hotp URI, got {!r}".format(otp_type))

        query = utils.parse_query(uri)
        if "counter" in query:
            check_counter(parse_int(query["counter"], "counter"))
        parameters = OTPParameters.from_query(query)
        logger.debug(
            "Parsed hotp URI: algorithm=%s digits=%d", parameters.algorithm.name, parameters.password_length
        )
        return cls.from_parameters(parameters)

    @property
    def parameters(self) -> OTPParameters:
        return self._parameters

    @property
    def secret(self) -> bytes:
        return self._parameters.secret

    @property
    def password_length(self) -> int:
        return self._parameters.password_length

    @property
    def algorithm(self) -> HMACAlgorithm:
        return self._parameters.algorithm

    def generate(self, counter: int) -> str:
        """
        Generates the OTP for the given count.

        :param counter: the OTP HMAC counter
        :returns: OTP
        :raises GenerationFailed: if the HMAC could not be computed
        """
        return self._parameters.generate_code(counter)

    def verify(self, code: str, counter: int, delay_window: int = 0) -> bool:
        """
        Verifies the OTP passed in against the codes around ``counter``.

        :param code: the OTP to check against
        :param counter: the OTP HMAC counter
        :param delay_window: how many counters before and after ``counter``
            are also accepted
        """
        return self._parameters.verify_code(code, counter, delay_window)

    def get_uri(self, counter: int, issuer: str, account: str = "") -> str:
        """
        Returns the provisioning URI for the OTP. This can then be
        encoded in a QR Code and used to provision an OTP app like
        Google Authenticator.

        See also:
            https://github.com/google/google-authenticator/wiki/Key-Uri-Format

        :param counter: counter the app should start from
        :param issuer: the name of the OTP issuer; this will be the
            organization title of the OTP entry in Authenticator
        :param account: name of the user account, may be empty
        :returns: provisioning URI
        :raises MalformedURI: when the URI cannot be assembled
        :raises InvalidArgument: if counter is not an unsigned 64-bit integer
        """
        query: Dict[str, Any] = {"counter": check_counter(counter)}
        if issuer:
            query["issuer"] = issuer
        return self._parameters.provisioning_uri(self.OTP_TYPE, build_label(issuer, account), query)

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._parameters == other._parameters

    def __hash__(self) -> int:
        return hash((self.OTP_TYPE, self._parameters))

    def __repr__(self) -> str:
        return "HOTP(password_length={}, algorithm={})".format(self.password_length, self.algorithm.name)
