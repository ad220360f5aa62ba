"""
sellers - Seller Policy Zoo

This package contains the airline seller policies that play the game:
- RandomSeller: uniform over the legal menu
- FixedSeller: constant seat order and price
- InventorySeller: prices against remaining inventory per remaining round

All policies must implement the base.Seller interface.
"""

__version__ = "1.0.0"
