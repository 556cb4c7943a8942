from .base_player import BasePlayer
from .computer_player import ComputerPlayer

__all__ = ['BasePlayer', 'ComputerPlayer']
