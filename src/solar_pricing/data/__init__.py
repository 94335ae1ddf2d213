"""Data subpackage - catalog schema, loading and build reports."""
