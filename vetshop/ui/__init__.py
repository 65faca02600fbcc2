"""
Streamlit UI package: storefront, customer account area and the
session-aware navigation widgets it is built from.
"""

from __future__ import annotations
