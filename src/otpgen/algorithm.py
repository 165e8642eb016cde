import hashlib
from enum import Enum
from typing import Callable

from .exceptions import InvalidArgument


class HMACAlgorithm(Enum):
    """
    Hash functions an OTP generator may use inside its HMAC.

    The member name is the spelling used in provisioning URIs, the value is
    the ``hashlib`` name.
    """

    SHA1 = "sha1"
    SHA256 = "sha256"
    SHA512 = "sha512"

    @classmethod
    def parse(cls, name: str) -> "HMACAlgorithm":
        """
        Looks up an algorithm by its URI spelling.

        :param name: exactly ``SHA1``, ``SHA256`` or ``SHA512``
        :raises InvalidArgument: for any other value, including other casings
        """
        if isinstance(name, str) and name in cls.__members__:
            return cls.__members__[name]
        raise InvalidArgument("Invalid value for algorithm, must be SHA1, SHA256 or SHA512")

    @property
    def hash_function(self) -> Callable:
        return getattr(hashlib, self.value)

    @property
    def digest_size(self) -> int:
        return self.hash_function().digest_size

    def __str__(self) -> str:
        return self.name
