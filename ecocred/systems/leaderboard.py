# ecocred/systems/leaderboard.py
import logging
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from ecocred.events import LeaderboardUpdated
from ecocred.models import CompanyProfile, LeaderboardEntry
from ecocred.systems.chain import LedgerTransaction
from ecocred.utils.addresses import normalize_address

logger = logging.getLogger(__name__)


class Leaderboard:
    """Companies ranked by total credits earned; ties broken by address."""

    def _rerank(self, session: Session, now: int) -> Dict[str, LeaderboardEntry]:
        # Credits are Uint256 strings on SQLite, so rank in Python rather than ORDER BY.
        profiles = session.query(CompanyProfile).all()
        profiles.sort(key=lambda p: (-p.total_credits_earned, p.address))
        entries = {e.company: e for e in session.query(LeaderboardEntry).all()}
        for rank, profile in enumerate(profiles, start=1):
            entry = entries.get(profile.address)
            if entry is None:
                entry = LeaderboardEntry(company=profile.address)
                session.add(entry)
                entries[profile.address] = entry
            if entry.rank != rank or entry.credits != profile.total_credits_earned:
                entry.rank = rank
                entry.credits = profile.total_credits_earned
                entry.updated_at = now
        return entries

    def record(self, tx: LedgerTransaction, company: str) -> Dict:
        entries = self._rerank(tx.session, tx.now)
        entry = entries.get(company)
        if entry is None:
            return {}
        tx.emit(LeaderboardUpdated(company=company, rank=entry.rank, credits=entry.credits))
        return entry.to_dict()

    def rebuild(self, session: Session, now: int) -> int:
        """Recomputes every entry from the company profiles; returns the entry count."""
        entries = self._rerank(session, now)
        logger.info(f"📊 Leaderboard rebuilt with {len(entries)} entries.")
        return len(entries)

    def top_companies(self, session: Session, limit: int = 10) -> List[Dict]:
        entries = (
            session.query(LeaderboardEntry)
            .order_by(LeaderboardEntry.rank.asc())
            .limit(limit)
            .all()
        )
        return [e.to_dict() for e in entries]

    def position_of(self, session: Session, company: str) -> Optional[int]:
        entry = session.get(LeaderboardEntry, normalize_address(company, "company"))
        return entry.rank if entry else None


# Singleton instance
leaderboard = Leaderboard()
