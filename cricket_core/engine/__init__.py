from cricket_core.engine.match_engine import MatchEngine
from cricket_core.engine.auction_engine import AuctionEngine
from cricket_core.engine.tournament_engine import TournamentEngine

__all__ = ["MatchEngine", "AuctionEngine", "TournamentEngine"]
