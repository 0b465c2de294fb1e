"""Adapters binding the reconciliation core to files and external tools."""
