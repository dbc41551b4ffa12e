# ecocred/systems/analytics.py
"""Read-only aggregates over the ledger tables. Nothing here mutates state."""
import logging
from collections import Counter
from typing import Any, Dict

from sqlalchemy.orm import Session

from ecocred.constants import ActionOutcome, ActionStatus, ListingStatus
from ecocred.models import CompanyProfile, EcoAction, Listing
from ecocred.systems.badge_registry import badge_registry
from ecocred.systems.credit_token import credit_token
from ecocred.systems.retirement import retirement_registry
from ecocred.systems.staking import staking_engine
from ecocred.utils.addresses import normalize_address

logger = logging.getLogger(__name__)


class Analytics:

    def platform_stats(self, session: Session) -> Dict[str, Any]:
        actions = session.query(EcoAction.status).all()
        verified = sum(1 for a in actions if a.status == ActionStatus.VERIFIED)
        minted = credit_token.total_supply(session) + credit_token.total_burned(session)
        active_companies = session.query(CompanyProfile).filter(CompanyProfile.total_actions > 0).count()
        return {
            "total_actions": len(actions),
            "verified_actions": verified,
            "pending_actions": len(actions) - verified,
            "total_credits_minted": str(minted),
            "total_credits_retired": str(retirement_registry.total_retired(session)),
            "total_credits_staked": str(staking_engine.total_staked(session)),
            "active_listings": session.query(Listing).filter_by(status=ListingStatus.ACTIVE).count(),
            "active_companies": active_companies,
        }

    def credit_distribution(self, session: Session) -> Dict[str, Any]:
        supply = credit_token.total_supply(session)
        staked = staking_engine.total_staked(session)
        return {
            "total_supply": str(supply),
            "total_burned": str(credit_token.total_burned(session)),
            "staked": str(staked),
            "retired": str(retirement_registry.total_retired(session)),
            "circulating": str(supply - staked),
        }

    def action_stats(self, session: Session) -> Dict[str, Any]:
        rows = session.query(EcoAction.category, EcoAction.outcome).all()
        outcomes = Counter(row.outcome.value for row in rows)
        categories = Counter(row.category or "uncategorized" for row in rows)
        return {
            "total": len(rows),
            "by_outcome": {o.value: outcomes.get(o.value, 0) for o in ActionOutcome},
            "by_category": dict(categories),
        }

    def company_analytics(self, session: Session, company: str) -> Dict[str, Any]:
        company = normalize_address(company, "company")
        profile = session.get(CompanyProfile, company)
        return {
            "company": company,
            "balance": str(credit_token.balance_of(session, company)),
            "staked": str(staking_engine.total_staked(session, company)),
            "retired": str(retirement_registry.retired_by(session, company)),
            "reputation_score": profile.reputation_score if profile else 0,
            "total_credits_earned": str(profile.total_credits_earned) if profile else "0",
            "total_actions": profile.total_actions if profile else 0,
            "verified_actions": profile.verified_actions if profile else 0,
            "badges": badge_registry.balance_of(session, company),
        }


# Singleton instance
analytics = Analytics()
