#!/usr/bin/env python3
"""
Basic forgescan usage example.

Runs a discovery over two in-memory forges, then (if FORGESCAN_CONFIG_PATH
points at a config file) over the real forges it lists. The mock forges
come from forgescan.testing, which needs the test extra installed.
Run with: python examples/basic_usage.py
"""

import logging
import os
import threading

from forgescan import (
    DiscoveryService,
    FilteringConfig,
    ForgeManager,
    ForgeScanError,
    ForgeType,
    configure_logging,
    load_config,
)
from forgescan.exceptions import NetworkError
from forgescan.testing import MockForgeClient, create_forge_config, create_mock_repository

configure_logging(level=logging.INFO)

print("=== forgescan Basic Usage Example ===\n")

# 1. Discovery over mock forges
print("1. Discovering repositories on two mock forges...")

github = MockForgeClient(name="github-main")
github.add_repository(create_mock_repository("acme/handbook", has_docs=True))
github.add_repository(create_mock_repository("acme/service", has_docs=False))
github.add_repository(create_mock_repository("acme/old-site", has_docs=True, archived=True))
github.add_repository(create_mock_repository("acme/api-internal", has_docs=True))

gitlab = MockForgeClient(name="gitlab-self", forge_type=ForgeType.GITLAB)
gitlab.configure_list_repositories(error=NetworkError("CONNECTION_ERROR", "connection refused"))

manager = ForgeManager()
manager.add_forge(create_forge_config(name="github-main", organizations=["acme"]), github)
manager.add_forge(
    create_forge_config(name="gitlab-self", forge_type=ForgeType.GITLAB, groups=["42"]), gitlab
)

service = DiscoveryService(manager, filtering=FilteringConfig(exclude_patterns=["*-internal"]))
result = service.discover_all()

print(f"   Included: {[r.full_name for r in result.repositories]}")
print(f"   Filtered: {[r.full_name for r in result.filtered]}")
for forge, error in result.errors.items():
    print(f"   {forge} failed: {error}")

assert [r.full_name for r in result.repositories] == ["acme/handbook"]
assert set(result.errors) == {"gitlab-self"}

print("\n   OK: Failures stay contained to their forge\n")

# 2. Conversion for the site build
print("2. Converting included repositories for the build pipeline...")
for build in service.convert_to_build_repositories(result.repositories):
    print(f"   {build.name}: {build.url} @ {build.branch or 'default branch'}")

print("\n3. JSON output:")
print(result.to_json(indent=2))

# 4. Real forges
config_path = os.environ.get("FORGESCAN_CONFIG_PATH")
if config_path:
    print(f"\n4. Discovering forges from {config_path} (gives up after 5 minutes)...")
    cancel = threading.Event()
    deadline = threading.Timer(300, cancel.set)
    deadline.start()
    try:
        config = load_config(config_path)
        live = DiscoveryService.from_config(config)
        live_result = live.discover_all(cancel=cancel)
    except ForgeScanError as e:
        print(f"   Configuration problem: {e}")
    else:
        print(f"   {len(live_result.repositories)} repositories with documentation")
        print(f"   {len(live_result.filtered)} filtered, {len(live_result.errors)} forge(s) failed")
    finally:
        deadline.cancel()
else:
    print("\n4. Set FORGESCAN_CONFIG_PATH to scan real forges")

print("\n=== Example complete ===")
