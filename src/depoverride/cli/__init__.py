"""Command line interface for depoverride."""
