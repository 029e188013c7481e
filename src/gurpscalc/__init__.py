"""GURPS character sheet calculation engine.

Turns a character's attribute adjustments, damage and cost reductions into the
values a sheet displays: attribute values, pool levels, point costs and pool
state thresholds.
"""

__version__ = "0.1.0"
