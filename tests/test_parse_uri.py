import pytest

import otpgen
from otpgen import HOTP, TOTP, InvalidArgument, MalformedURI, utils

from .conftest import FakeClock


class TestParseURI:

    def test_dispatches_hotp(self):
        otp = otpgen.parse_uri("otpauth://hotp/Issuer:alice?secret=GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ&counter=3")
        assert isinstance(otp, HOTP)
        assert otp.generate(3) == "969429"

    def test_dispatches_totp(self):
        otp = otpgen.parse_uri(
            "otpauth://totp/Issuer:alice?secret=GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ&digits=8&period=30",
            clock=FakeClock(59),
        )
        assert isinstance(otp, TOTP)
        assert otp.now() == "94287082"

    def test_rejects_unknown_type(self):
        with pytest.raises(InvalidArgument):
            otpgen.parse_uri("otpauth://motp/Issuer?secret=GEZDGNBVGY3TQOJQ")

    def test_rejects_other_scheme(self):
        with pytest.raises(MalformedURI):
            otpgen.parse_uri("https://example.com/totp?secret=GEZDGNBVGY3TQOJQ")

    def test_all_errors_share_base_class(self):
        with pytest.raises(otpgen.OTPError):
            otpgen.parse_uri("otpauth://totp/Issuer?digits=6")


class TestRandomSecrets:

    def test_random_secret_length(self):
        assert len(otpgen.random_secret()) == 20
        assert len(otpgen.random_secret(32)) == 32

    def test_random_secret_is_random(self):
        assert otpgen.random_secret() != otpgen.random_secret()

    def test_random_secret_too_short(self):
        with pytest.raises(InvalidArgument):
            otpgen.random_secret(8)

    def test_random_base32(self):
        secret = otpgen.random_base32()
        assert len(secret) == 32
        assert set(secret) <= set("ABCDEFGHIJKLMNOPQRSTUVWXYZ234567")

    def test_random_base32_too_short(self):
        with pytest.raises(InvalidArgument):
            otpgen.random_base32(8)

    def test_random_base32_decodes_to_generator_key(self):
        key = utils.base32_decode(otpgen.random_base32())
        assert len(key) == 20
        hotp = HOTP(key)
        assert hotp.verify(hotp.generate(0), 0)

    def test_random_secret_works_as_key(self):
        totp = TOTP(otpgen.random_secret())
        assert totp.verify(totp.now())
