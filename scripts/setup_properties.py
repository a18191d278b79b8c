#!/usr/bin/env python3
"""CLI script to create the custom candidate properties in HubSpot.

Usage:
    python scripts/setup_properties.py
    python scripts/setup_properties.py --check-only

Reads HUBSPOT_ACCESS_TOKEN (and optional HUBSPOT_BASE_URL) from environment
or .env file. Probes which catalog properties exist, then creates the
missing ones. Safe to run multiple times -- existing properties count as
success. Exits 1 if any property could not be created.
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys

# Ensure project root is on sys.path so we can import src.hubspot_bridge
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from dotenv import load_dotenv  # noqa: E402

# Load .env from project root
load_dotenv(os.path.join(os.path.dirname(__file__), "..", ".env"))


async def setup(check_only: bool) -> int:
    """Run the catalog probe and (unless check_only) provisioning. Returns exit code."""
    from src.hubspot_bridge.crm.http import HubSpotHTTP
    from src.hubspot_bridge.crm.properties import PropertyProvisioner
    from src.hubspot_bridge.crm.schemas import ProvisioningSummary
    from src.hubspot_bridge.errors import ConfigurationError
    from src.hubspot_bridge.main import load_config

    try:
        config = load_config()
    except ConfigurationError as exc:
        print(f"Configuration error: {exc}")
        return 1

    provisioner = PropertyProvisioner(HubSpotHTTP(config))

    print("Checking existing properties...")
    for lookup in await provisioner.check_properties_exist():
        state = "exists" if lookup.exists else "missing"
        suffix = f" ({lookup.error})" if lookup.error else ""
        print(f"  {lookup.name}: {state}{suffix}")

    if check_only:
        return 0

    print("\nCreating custom properties...")
    results = await provisioner.create_all_custom_properties()
    for result in results:
        if result.success:
            print(f"  {result.name}: {result.status.value}")
        else:
            print(f"  {result.name}: FAILED - {result.error}")

    summary = ProvisioningSummary.from_results(results)
    print(f"\nTotal: {summary.total}  Successful: {summary.successful}  Failed: {summary.failed}")

    if summary.failed:
        print("Some properties failed to create. Check the errors above.")
        return 1
    print("All custom properties are ready!")
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Create custom candidate properties in HubSpot")
    parser.add_argument(
        "--check-only",
        action="store_true",
        help="Only report which properties exist; create nothing",
    )
    args = parser.parse_args()

    sys.exit(asyncio.run(setup(args.check_only)))


if __name__ == "__main__":
    main()
