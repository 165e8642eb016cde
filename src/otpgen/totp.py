import datetime
import logging
import math
import time
from typing import Any, Callable, Dict, Optional, Union

from . import utils
from .algorithm import HMACAlgorithm
from .exceptions import InvalidArgument, MalformedURI
from .otp import DEFAULT_PASSWORD_LENGTH, OTPParameters, build_label, parse_int

logger = logging.getLogger(__name__)

DEFAULT_PERIOD = 30

Instant = Union[int, float, datetime.datetime]


class TOTP(object):
    """
    Handler for time-based OTP counters.
    """

    OTP_TYPE = "totp"

    def __init__(
        self,
        secret: bytes,
        password_length: int = DEFAULT_PASSWORD_LENGTH,
        algorithm: Union[HMACAlgorithm, str] = HMACAlgorithm.SHA1,
        period: int = DEFAULT_PERIOD,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """
        :param secret: raw HMAC key
        :param password_length: number of digits in the OTP, 6 to 8
        :param algorithm: digest function to use in the HMAC (expected to be SHA1)
        :param period: the time interval in seconds for OTP. This defaults to 30.
        :param clock: returns the current Unix time in seconds
        :raises InvalidArgument: when any option is invalid
        """
        parameters = OTPParameters(secret, password_length=password_length, algorithm=algorithm)
        self._init(parameters, period, clock)

    def _init(self, parameters: OTPParameters, period: int, clock: Callable[[], float]) -> None:
        if isinstance(period, bool) or not isinstance(period, int) or period <= 0:
            raise InvalidArgument("Period must be a positive number of seconds")
        self._parameters = parameters
        self._period = period
        self._clock = clock

    @classmethod
    def with_default_values(cls, secret: bytes) -> "TOTP":
        return cls(secret)

    @classmethod
    def from_parameters(
        cls, parameters: OTPParameters, period: int = DEFAULT_PERIOD, clock: Callable[[], float] = time.time
    ) -> "TOTP":
        totp = cls.__new__(cls)
        totp._init(parameters, period, clock)
        return totp

    @classmethod
    def from_otpauth_uri(cls, uri: str, clock: Callable[[], float] = time.time) -> "TOTP":
        """
        Rebuilds a generator from a provisioning URI.

        :param uri: ``otpauth://totp/...`` URI
        :param clock: time source for the new generator
        :raises MalformedURI: if the URI cannot be parsed
        :raises InvalidArgument: if it is not a TOTP URI or a parameter is invalid
        """
        scheme, otp_type, _ = utils.split_uri(uri)
        if scheme != "otpauth":
            raise MalformedURI("Not an otpauth URI")
        if otp_type != cls.OTP_TYPE:
            raise InvalidArgument("Expected a totp URI, got {!r}".format(otp_type))

        query = utils.parse_query(uri)
        period = DEFAULT_PERIOD
        if "period" in query:
            period = parse_int(query["period"], "period")
        parameters = OTPParameters.from_query(query)
        logger.debug(
            "Parsed totp URI: algorithm=%s digits=%d period=%d",
            parameters.algorithm.name,
            parameters.password_length,
            period,
        )
        return cls.from_parameters(parameters, period=period, clock=clock)

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

    @property
    def period(self) -> int:
        return self._period

    def _seconds(self, instant: Optional[Instant]) -> float:
        if instant is None:
            seconds = self._clock()
        elif isinstance(instant, datetime.datetime):
            seconds = instant.timestamp()
        else:
            seconds = instant
        if isinstance(seconds, bool) or not isinstance(seconds, (int, float)):
            raise InvalidArgument("Instant must be a number of seconds, got {!r}".format(seconds))
        if isinstance(seconds, float) and not math.isfinite(seconds):
            raise InvalidArgument("Instant must be a finite number of seconds, got {!r}".format(seconds))
        return seconds

    def counter(self, instant: Optional[Instant] = None) -> int:
        """
        Number of whole periods elapsed since the Unix epoch.

        :param instant: Unix seconds or a datetime; the clock is read when omitted
        """
        return int(self._seconds(instant) // self._period)

    def generate(self, instant: Instant) -> str:
        """
        Generates the OTP for a point in time.

        :param instant: Unix seconds or a datetime
        :raises InvalidArgument: for instants before the epoch
        :raises GenerationFailed: if the HMAC could not be computed
        """
        return self._parameters.generate_code(self.counter(instant))

    def at(self, instant: Instant, counter_offset: int = 0) -> str:
        """
        Accepts either a Unix timestamp integer or a datetime object.

        :param instant: the time to generate an OTP for
        :param counter_offset: the amount of ticks to add to the time counter
        :returns: OTP value
        """
        return self._parameters.generate_code(self.counter(instant) + counter_offset)

    def now(self) -> str:
        """
        Generate the current time OTP

        :returns: OTP value
        """
        return self._parameters.generate_code(self.counter())

    def verify(self, code: str, instant: Optional[Instant] = None, delay_window: int = 0) -> bool:
        """
        Verifies the OTP passed in against the current time OTP.

        :param code: the OTP to check against
        :param instant: time to check OTP at (defaults to now)
        :param delay_window: extends the validity to this many counter ticks
            before and after the current one
        :returns: True if verification succeeded, False otherwise
        """
        return self._parameters.verify_code(code, self.counter(instant), delay_window)

    def duration_until_next_time_window(self, instant: Optional[Instant] = None) -> float:
        """
        Seconds left before the code for ``instant`` (or now) changes.
        """
        seconds = self._seconds(instant)
        return self._period - (seconds % self._period)

    def get_uri(self, issuer: str, account: str = "") -> str:
        """
        Returns the provisioning URI for the OTP. This can then be
        encoded in a QR Code and used to provision an OTP app like
        Google Authenticator.

        See also:
            https://github.com/google/google-authenticator/wiki/Key-Uri-Format

        :param issuer: the name of the OTP issuer; this will be the
            organization title of the OTP entry in Authenticator
        :param account: name of the user account, may be empty
        :returns: provisioning URI
        :raises MalformedURI: when the URI cannot be assembled
        """
        query: Dict[str, Any] = {"period": self._period}
        if issuer:
            query["issuer"] = issuer
        return self._parameters.provisioning_uri(self.OTP_TYPE, build_label(issuer, account), query)

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._parameters == other._parameters and self._period == other._period

    def __hash__(self) -> int:
        return hash((self.OTP_TYPE, self._parameters, self._period))

    def __repr__(self) -> str:
        return "TOTP(password_length={}, algorithm={}, period={})".format(
            self.password_length, self.algorithm.name, self._period
        )
