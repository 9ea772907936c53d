"""Test suite for dgauth.

Organized into three categories:

1. core/: Unit tests for the records and the storage contract
   - Runs the shared AuthStoreContract against the in-memory fake

2. adapters/: Tests for adapter implementations
   - Dgraph client, formatting, schema and store, against a fake Dgraph
     endpoint (and a live Dgraph when DGRAPH_LIVE_TESTS is set)

3. fakes/: Port and backend fakes for testing
"""
