"""Unit tests for core records and the storage contract."""
