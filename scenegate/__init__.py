"""Scene-state gating for an AI screenwriting partner"""

__version__ = "0.1.0"
