"""
Solar Pricing Package

Pricing and configuration resolution for dealer solar quotations.
Resolves component prices, package prices, phase and default bills of materials
from an immutable pricing catalog, falling back gracefully when the catalog has
no exact match.
"""

__version__ = "1.0.0"
