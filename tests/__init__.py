"""Test suite for the MINX token ledger.

This package contains tests for:
- Ledger state transitions, preconditions and invariants
- Event records, serialization and the event emitter
- Request validation and deployment configuration
- TokenRuntime receipts, request envelopes and the transaction log
- Integration scenarios replaying the token's deployment test suite
"""
