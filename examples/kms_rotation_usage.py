#!/usr/bin/env python3
"""Example rotating AWS KMS signing keys and publishing the JWKS to a file.

Requires AWS credentials allowed to create, describe and schedule deletion of
KMS keys and to manage aliases. Point ``--endpoint-url`` at LocalStack to try
it without an AWS account.
"""

import argparse
import logging
from pathlib import Path

from kms_jwks_manager import KeyManager, KmsClientConfig, KmsJwksError
from kms_jwks_manager.context import CallContext


def main() -> None:
    """Rotate the keys of a prefix and write the resulting JWKS."""
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("prefix", help="Alias prefix, e.g. my-service")
    parser.add_argument("--output", default="jwks.json", help="Where to write the JWKS")
    parser.add_argument("--algorithm", default="RS256", help="Algorithm declared on every key")
    parser.add_argument("--region")
    parser.add_argument("--endpoint-url")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    manager = KeyManager.from_kms(
        args.prefix,
        client_config=KmsClientConfig(region_name=args.region, endpoint_url=args.endpoint_url),
    )
    ctx = CallContext(timeout=120)

    try:
        outcome = manager.rotate(ctx=ctx)
        if outcome.deletion_error is not None:
            print(f"⚠️  Rotation completed but {outcome.deletion_error}")
        key_set = manager.export(algorithm=args.algorithm, ctx=ctx)
    except KmsJwksError as e:
        print(f"❌ {e}")
        raise SystemExit(1)

    Path(args.output).write_text(key_set.to_json(pretty=True) + "\n", encoding="utf-8")
    print(f"✅ Wrote {len(key_set)} keys to {args.output}")


if __name__ == "__main__":
    main()
