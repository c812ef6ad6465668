"""
Test Suite for Fuel Reconciliation

Test Structure:
- fixtures/: Shared record builders and CSV writers
- unit/: Unit tests mirroring src/ package structure
- integration/: End-to-end reconciliation and upload workflows

All test data is synthetic; driver names, references and invoices are made up.
"""
