"""
Letter codec.

Turns a LetterRecord into a URL-safe token and back. The token is the only
storage a letter has, so encoding is a pure function of the four fields:
no timestamp, nonce or salt.
"""
import base64
import binascii
import json
import logging
import re
from typing import Optional

from domain.errors import LetterDecodeError
from domain.models import LETTER_FIELDS, LetterRecord

logger = logging.getLogger(__name__)

_TOKEN_ALPHABET = re.compile(r"[A-Za-z0-9_-]*")


def encode_letter(record: LetterRecord) -> str:
    """
    Encode a letter as an unpadded URL-safe base64 token.

    Raises:
        TypeError: If any field is not a string (callers normalize to "")
    """
    payload = record.to_dict()
    for key in LETTER_FIELDS:
        if not isinstance(payload[key], str):
            raise TypeError(f"Letter field {key!r} must be a string, got {type(payload[key]).__name__}")

    text = json.dumps(payload, ensure_ascii=False, separators=(",", ":"))
    encoded = base64.b64encode(text.encode("utf-8")).decode("ascii")
    return encoded.replace("+", "-").replace("/", "_").rstrip("=")


def decode_letter_or_raise(token: str) -> LetterRecord:
    """
    Decode a token, raising LetterDecodeError on any defect.

    Only the exact token encode_letter would produce is accepted, and no
    partial record is ever returned.
    """
    if not isinstance(token, str):
        raise LetterDecodeError("token is not a string")
    if not _TOKEN_ALPHABET.fullmatch(token):
        raise LetterDecodeError("token contains characters outside the URL-safe alphabet", token)
    if len(token) % 4 == 1:
        raise LetterDecodeError("token length is not a valid base64 length", token)

    b64 = token.replace("-", "+").replace("_", "/")
    b64 += "=" * (-len(b64) % 4)

    try:
        raw = base64.b64decode(b64, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise LetterDecodeError(f"invalid base64: {exc}", token) from exc

    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise LetterDecodeError("payload is not valid UTF-8", token) from exc

    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise LetterDecodeError(f"payload is not JSON: {exc.msg}", token) from exc

    if not isinstance(data, dict):
        raise LetterDecodeError("payload is not an object", token)
    for key in LETTER_FIELDS:
        if key not in data:
            raise LetterDecodeError(f"missing field {key!r}", token)
        if not isinstance(data[key], str):
            raise LetterDecodeError(f"field {key!r} is not a string", token)

    record = LetterRecord.from_dict(data)
    # Exactly one token per letter
    try:
        canonical = encode_letter(record)
    except UnicodeEncodeError as exc:
        raise LetterDecodeError("payload has unpaired surrogates", token) from exc
    if canonical != token:
        raise LetterDecodeError("token is not in canonical form", token)
    return record


def decode_letter(token: str) -> Optional[LetterRecord]:
    """Decode a token; returns None when it is not a valid letter."""
    try:
        return decode_letter_or_raise(token)
    except LetterDecodeError:
        return None


def decode_letter_or_empty(token: Optional[str]) -> LetterRecord:
    """Decode a token, falling back to the empty letter so callers can always render."""
    if not token:
        return LetterRecord.empty()
    try:
        return decode_letter_or_raise(token)
    except LetterDecodeError as exc:
        logger.debug("Falling back to empty letter: %s", exc.reason)
        return LetterRecord.empty()
