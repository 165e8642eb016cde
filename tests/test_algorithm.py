import pytest

from otpgen import HMACAlgorithm, InvalidArgument


class TestHMACAlgorithm:

    @pytest.mark.parametrize("name", ["SHA1", "SHA256", "SHA512"])
    def test_parse_is_inverse_of_name(self, name):
        assert HMACAlgorithm.parse(name).name == name

    @pytest.mark.parametrize("name", ["sha1", "Sha256", "SHA384", "MD5", "", None])
    def test_parse_rejects_unknown_names(self, name):
        with pytest.raises(InvalidArgument):
            HMACAlgorithm.parse(name)

    def test_invalid_argument_is_a_value_error(self):
        with pytest.raises(ValueError):
            HMACAlgorithm.parse("SHA3")

    @pytest.mark.parametrize(
        "algorithm,size",
        [(HMACAlgorithm.SHA1, 20), (HMACAlgorithm.SHA256, 32), (HMACAlgorithm.SHA512, 64)],
    )
    def test_digest_size(self, algorithm, size):
        assert algorithm.digest_size == size

    def test_str_is_uri_spelling(self):
        assert str(HMACAlgorithm.SHA256) == "SHA256"
