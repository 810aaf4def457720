"""Command-line interface for the AssetVault sync agent."""
