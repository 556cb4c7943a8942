from .app import create_app
from .game_controller import GameController

__all__ = ['create_app', 'GameController']
