"""
Conformance Test Suite

This suite defines the NORMATIVE behavior of the Black-76 precompile.
Any compliant implementation MUST pass these tests.

The tests are organized by invariant:
1. determinism.py - Identical requests give identical responses, under concurrency too
2. bounds.py - No-arbitrage bounds and put-call parity on every response

These tests use hypothesis for property-based testing.
"""
