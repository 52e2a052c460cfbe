"""Toy password encoding.

This is base64, not a hash: anyone with the stored value can recover the
password. It stands in for a salted hash in the demo only.
"""
import base64
import hmac


def encode_password(password: str) -> str:
    return base64.b64encode(password.encode("utf-8")).decode("ascii")


def password_matches(password: str, encoded: str) -> bool:
    return hmac.compare_digest(encode_password(password), encoded or "")
