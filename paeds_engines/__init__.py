"""
Paediatric Emergency Engines

Trigger-and-sequencing core for paediatric emergency protocols.
"""

__version__ = "1.0.0"
