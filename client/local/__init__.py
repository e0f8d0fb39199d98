"""
Local (offline) game module.

Hot-seat play on one device; the controller paces turns with a Qt timer.
"""

from .controller import LocalGameController

__all__ = ["LocalGameController"]
