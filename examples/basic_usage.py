#!/usr/bin/env python3
"""Example rotating keys in an in-memory key store and exporting a JWKS."""

import json
from datetime import datetime, timedelta, timezone

from kms_jwks_manager import InMemoryKeyStore, KeyManager, KeyTooYoungError


def main() -> None:
    """Walk one alias prefix through two rotations."""
    now = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def clock() -> datetime:
        return now

    store = InMemoryKeyStore(clock=clock)
    manager = KeyManager("example-service", store, clock=clock)

    print("🔐 KMS JWKS Manager Example")
    print("=" * 50)
    for generation, alias in manager.aliases.items():
        print(f"  {generation.value:<8} -> {alias}")

    # First rotation creates all three generations
    print("\n🔄 First rotation (forced, store is empty)...")
    outcome = manager.rotate(force=True, key_spec="ECC_NIST_P256")
    print(json.dumps(outcome.to_dict(), indent=2))

    # A second rotation right away is refused by the age gate
    print("\n⏳ Rotating again immediately...")
    try:
        manager.rotate(key_spec="ECC_NIST_P256")
    except KeyTooYoungError as e:
        print(f"  ❌ {e} (age {e.age}, minimum {e.minimum_age})")

    # A day later the current key is old enough
    now += timedelta(days=1)
    print("\n🔄 Rotating one day later...")
    outcome = manager.rotate(key_spec="ECC_NIST_P256")
    print(f"  ✅ Retired key {outcome.old_previous_id}, deletion scheduled: {outcome.deletion_scheduled}")

    print("\n📤 Exported key set:")
    print(manager.export(algorithm="ES256").to_json(pretty=True))


if __name__ == "__main__":
    main()
