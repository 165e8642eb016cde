import pytest

from otpgen import HOTP, TOTP, HMACAlgorithm

RFC_SECRET_SHA1 = b"12345678901234567890"
RFC_SECRET_SHA256 = b"12345678901234567890123456789012"
RFC_SECRET_SHA512 = b"1234567890123456789012345678901234567890123456789012345678901234"


@pytest.fixture
def secret():
    return RFC_SECRET_SHA1


@pytest.fixture
def hotp(secret):
    return HOTP.with_default_values(secret)


class FakeClock:
    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock(59)


@pytest.fixture
def totp(clock):
    return TOTP(RFC_SECRET_SHA1, password_length=8, algorithm=HMACAlgorithm.SHA1, clock=clock)
