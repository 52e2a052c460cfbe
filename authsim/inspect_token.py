"""Print the claims carried by a session credential.

Usage:
    python -m authsim.inspect_token <token>
"""
import json
import sys

from authsim.auth.errors import AuthError
from authsim.auth.session_token import validate_token


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    if len(args) != 1:
        print("Usage: python -m authsim.inspect_token <token>", file=sys.stderr)
        return 2
    try:
        claims = validate_token(args[0])
    except AuthError as exc:
        print(f"{exc.code}: {exc.message}", file=sys.stderr)
        return 1
    print(json.dumps(claims.model_dump(mode="json"), indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
