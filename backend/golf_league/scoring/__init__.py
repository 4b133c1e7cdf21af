"""Scoring engines for best-ball match play."""

from . import match_play, net_score

__all__ = [
    "match_play",
    "net_score",
]
