"""Logging, error handling and transaction helpers."""
