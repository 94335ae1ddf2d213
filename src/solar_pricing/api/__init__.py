"""API subpackage - FastAPI service over the pricing engine."""
