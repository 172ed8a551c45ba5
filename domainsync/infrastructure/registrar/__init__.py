"""Registrar infrastructure package."""

from .synergy_wholesale_client import SynergyWholesaleClient

__all__ = ["SynergyWholesaleClient"]
