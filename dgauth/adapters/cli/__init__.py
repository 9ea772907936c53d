"""Command-line interface adapters for dgauth management.

Provides CLI commands for provisioning the schema and inspecting or
removing stored users, sessions and accounts.
"""
