"""
Collection Agent Ledger - Source Package

Record keeping for a small agent-run collection business: customers,
cash collections against those customers, and bank deposits of the
collected cash.

DESIGN PRINCIPLES:
1. One store object owns the ledger and is handed to the UI explicitly
2. Every mutation rewrites the full snapshot to storage
3. Validation failures are reported, never silently corrected
4. Storage failures are logged and never crash the session
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Collection Agent Ledger Team"
