"""Warehouse back-office ledger: payroll, AP/AR aging, chart of accounts and batch tracking."""

__version__ = "0.1.0"
