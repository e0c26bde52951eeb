from .poll import LoopState, PollLoop

__all__ = ["LoopState", "PollLoop"]
