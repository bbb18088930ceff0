"""Compose expense reimbursement applications as a single PDF."""

__version__ = "0.4.0"
