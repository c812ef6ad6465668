"""
Test Fixtures and Utilities

Builders for comparison records and stored rows, plus CSV writers for the
two card-portal export formats. All data is synthetic.
"""
