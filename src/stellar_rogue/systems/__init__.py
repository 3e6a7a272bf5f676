from .state_machine import State, StateMachine

__all__ = ["State", "StateMachine"]
