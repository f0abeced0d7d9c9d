"""CLI module for surreal_rpc."""
