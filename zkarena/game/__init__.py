from zkarena.game.traits import Agent, GameRules, PublicState, Reducer, current_mover

__all__ = ["Agent", "GameRules", "PublicState", "Reducer", "current_mover"]
