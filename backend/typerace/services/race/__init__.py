"""Race domain services: start policy and completion/ranking.

Pure decision logic over a Room. The session gateway applies the results
and owns every emit, keeping transport concerns out of race rules.
"""

from .evaluator import CompletionRule, evaluate, rank_players
from .start import StartPolicy, can_host_start, should_auto_start

__all__ = [
    'CompletionRule',
    'StartPolicy',
    'can_host_start',
    'evaluate',
    'rank_players',
    'should_auto_start',
]
