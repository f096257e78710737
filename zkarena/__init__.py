"""
zkarena: trustless arbitration of two-agent games with verifiable execution.

사용 예시:
    >>> from zkarena.game import connect4
    >>> from zkarena.game.agents import random_agent
    >>> from zkarena.pipeline import ArbitrationPipeline
    >>> from zkarena.zkvm import LocalBackend
    >>> pipeline = ArbitrationPipeline(connect4.RULES, LocalBackend())
    >>> result = pipeline.run(random_agent, random_agent, submit=False)
"""

__version__ = "0.1.0"
