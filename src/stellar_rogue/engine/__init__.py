from .loop import GameLoop, LoopConfig

__all__ = ["GameLoop", "LoopConfig"]
