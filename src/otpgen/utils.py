import base64
import binascii
import logging
import re
import unicodedata
from hmac import compare_digest
from typing import Any, Dict, Mapping, Tuple
from urllib.parse import quote, unquote, urlsplit

from .exceptions import InvalidArgument, MalformedURI

logger = logging.getLogger(__name__)

# RFC 3986 scheme syntax, also used for the OTP type in the authority slot.
_TOKEN = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*$")


def build_query(query: Mapping[str, Any]) -> str:
    """
    Encodes a mapping as ``key=value&key=value``.

    Keys are sorted so the same mapping always gives the same string. Every
    character outside the unreserved set is percent-encoded, spaces as ``%20``.

    :param query: query parameters; non-string values are passed through ``str()``
    :returns: the query string, without a leading ``?``
    """
    parts = []
    for key in sorted(query):
        parts.append("{}={}".format(quote(str(key), safe=""), quote(str(query[key]), safe="")))
    return "&".join(parts)


def parse_query(uri: str) -> Dict[str, str]:
    """
    Decodes the query string of a URI into a dict.

    Accepts either a full URI or a bare query string. When a key repeats, the
    last occurrence wins.

    :param uri: URI or query string
    :raises MalformedURI: if a segment has no ``=``
    """
    if "?" in uri:
        query = uri.split("?", 1)[1]
    elif "://" in uri:
        query = ""
    else:
        query = uri
    query = query.split("#", 1)[0]

    items: Dict[str, str] = {}
    for segment in query.split("&"):
        if not segment:
            continue
        if "=" not in segment:
            raise MalformedURI("Query segment {!r} has no '='".format(segment))
        key, value = segment.split("=", 1)
        items[unquote(key)] = unquote(value)
    return items


def build_uri(otp_type: str, label: str, query: Mapping[str, Any], scheme: str = "otpauth") -> str:
    """
    Assembles ``{scheme}://{otp_type}/{label}?{query}``.

    The label is one path segment: ``/`` is encoded, ``:`` and ``@`` are left
    readable since authenticator apps split issuer and account on ``:``.

    :raises MalformedURI: when scheme or type is not a URI token, or the
        label cannot be encoded
    """
    if not isinstance(scheme, str) or not _TOKEN.match(scheme):
        raise MalformedURI("Invalid URI scheme: {!r}".format(scheme))
    if not isinstance(otp_type, str) or not _TOKEN.match(otp_type):
        raise MalformedURI("Invalid OTP type: {!r}".format(otp_type))
    try:
        path = quote(label, safe=":@")
        query_string = build_query(query)
    except (TypeError, UnicodeError) as e:
        raise MalformedURI("Could not encode provisioning URI: {}".format(e)) from e

    uri = "{0}://{1}/{2}?{3}".format(scheme, otp_type, path, query_string)
    logger.debug("Built %s provisioning URI with parameters %s", otp_type, sorted(query))
    return uri


def split_uri(uri: str) -> Tuple[str, str, str]:
    """
    Splits a provisioning URI into scheme, OTP type and decoded label.

    :raises MalformedURI: if the URI has no scheme or no type
    """
    if not isinstance(uri, str):
        raise MalformedURI("URI must be a string")
    try:
        parts = urlsplit(uri)
    except ValueError as e:
        raise MalformedURI(str(e)) from e
    if not parts.scheme or not parts.netloc:
        raise MalformedURI("Not an absolute URI: {!r}".format(uri))
    return parts.scheme, parts.netloc, unquote(parts.path[1:])


def base32_encode(data: bytes) -> str:
    # The otpauth scheme DOES NOT use base32 padding.
    return base64.b32encode(data).decode("ascii").rstrip("=")


def base32_decode(text: str) -> bytes:
    """
    Decodes a base32 secret, ignoring case and missing padding.

    :raises InvalidArgument: if ``text`` is not base32
    """
    secret = text.replace(" ", "").rstrip("=")
    missing_padding = len(secret) % 8
    if missing_padding != 0:
        secret += "=" * (8 - missing_padding)
    try:
        return base64.b32decode(secret, casefold=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidArgument("Secret is not valid base32") from e


def strings_equal(s1: str, s2: str) -> bool:
    """
    Timing-attack resistant string comparison.

    Normal comparison using == will short-circuit on the first mismatching
    character. This avoids that by scanning the whole string, though we
    still reveal to a timing attack whether the strings are the same
    length.
    """
    s1 = unicodedata.normalize("NFKC", s1)
    s2 = unicodedata.normalize("NFKC", s2)
    return compare_digest(s1.encode("utf-8"), s2.encode("utf-8"))
