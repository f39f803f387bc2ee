"""Discord runtime for the giveaway share engine.

`bots.giveaway` wires slash commands, the share dialog and the board refresh
loop onto :mod:`giveaway_engine`.
"""

__all__ = ["config", "giveaway", "shadow"]
