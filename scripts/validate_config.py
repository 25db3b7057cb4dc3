#!/usr/bin/env python3
"""Configuration validation script."""

import sys
from pathlib import Path
from typing import List, Optional

from pmdash_app.config.loader import ConfigLoader
from pmdash_app.config.validation import ConfigValidator, ValidationError


def validate_config_dir(config_dir: Optional[Path] = None) -> List[ValidationError]:
    """Validate the merged configuration for a config directory."""
    loader = ConfigLoader.create(config_dir)
    return ConfigValidator.validate_config(loader.merge_config())


def main():
    """Main validation function."""
    config_dir = Path(sys.argv[1]) if len(sys.argv) > 1 else None
    loader = ConfigLoader.create(config_dir)
    print(f"🔍 Validating PMDash configuration in {loader.config_dir}...")

    all_valid = True

    errors = validate_config_dir(config_dir)
    if errors:
        print(f"❌ Found {len(errors)} validation errors:")
        for error in errors:
            print(f"  • {error.field}: {error.message} (value: {error.value})")
        all_valid = False
    else:
        print("✅ settings.yaml is valid")

    # Explicit overrides sit above settings.yaml
    print("\n📋 Testing explicit overrides...")
    test_overrides = {
        "refresh": {"markets_interval_seconds": 60.0},
        "ranking": {"default_sort": "volume", "default_limit": 50},
    }
    errors = ConfigValidator.validate_config(loader.merge_config(test_overrides))
    if errors:
        print("❌ Override validation failed:")
        for error in errors:
            print(f"  • {error.field}: {error.message}")
        all_valid = False
    else:
        config = loader.load(test_overrides)
        print(f"✅ Override validation passed (sort={config.ranking.default_sort}, "
              f"limit={config.ranking.default_limit})")

    if all_valid:
        print("\n🎉 All configuration validation passed!")
        sys.exit(0)
    else:
        print("\n❌ Configuration validation failed!")
        sys.exit(1)


if __name__ == "__main__":
    main()
