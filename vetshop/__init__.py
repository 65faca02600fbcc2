"""VetShop: storefront, customer account area and admin gate for a veterinary clinic shop."""

__version__ = "1.0.0"
