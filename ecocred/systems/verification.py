# ecocred/systems/verification.py
"""
Eco action verification state machine.

An action moves SUBMITTED -> VERIFIED once the number of distinct verifier
decisions reaches the verification threshold. Whichever decision crosses the
threshold finalises the action, so the order in which verifiers act does not
matter. Finalisation mints the award, may issue a badge, and refreshes the
company's profile and leaderboard position.
"""
import logging
from typing import Any, Dict, List, Optional, Sequence

from flask import Flask
from sqlalchemy.orm import Session

from ecocred.constants import (
    BADGE_AWARD_THRESHOLD,
    BPS_DENOMINATOR,
    ONE_CREDIT,
    VERIFICATION_ADDRESS,
    ActionOutcome,
    ActionStatus,
    Role,
)
from ecocred.errors import (
    AlreadyFinalizedError,
    InvalidArgumentError,
    InvalidCreditsError,
    NotFoundError,
)
from ecocred.events import ActionFullyVerified, ActionVerified, EcoActionLogged, ParameterUpdated
from ecocred.models import CompanyProfile, EcoAction, VerificationRecord
from ecocred.systems import storage
from ecocred.systems.access_control import access_control, require_owner
from ecocred.systems.badge_registry import badge_registry
from ecocred.systems.chain import LedgerTransaction
from ecocred.systems.credit_token import credit_token
from ecocred.systems.expiration import expiration_registry
from ecocred.systems.leaderboard import leaderboard
from ecocred.systems.reputation import (
    FlatReputationScoring,
    ReputationScoring,
    get_strategy,
    reputation_score,
)
from ecocred.utils.addresses import normalize_address

logger = logging.getLogger(__name__)


def _profile(session: Session, company: str) -> CompanyProfile:
    profile = session.get(CompanyProfile, company)
    if profile is None:
        profile = CompanyProfile(
            address=company,
            total_credits_earned=0,
            total_actions=0,
            verified_actions=0,
            rejected_actions=0,
            reputation_score=0,
        )
        session.add(profile)
    return profile


class VerificationLedger:
    address = VERIFICATION_ADDRESS

    def __init__(self):
        self.app: Optional[Flask] = None
        self.scoring: ReputationScoring = FlatReputationScoring()
        logger.info("🌿 VerificationLedger instance created.")

    def init_app(self, app: Flask):
        self.app = app
        self.scoring = get_strategy(app.config.get("REPUTATION_STRATEGY", "flat"))
        logger.info(f"🌿 VerificationLedger initialized with '{self.scoring.name}' reputation scoring.")

    # ------------------------- Submission -------------------------
    def log_eco_action(
        self,
        tx: LedgerTransaction,
        caller: str,
        title: str,
        description: str,
        estimated_credits: int,
        location: str = "",
        category: str = "",
    ) -> int:
        """Records a company's claimed action in SUBMITTED state and returns its id."""
        if not isinstance(title, str) or not title.strip():
            raise InvalidArgumentError("title must not be empty")
        if isinstance(estimated_credits, bool) or not isinstance(estimated_credits, int) or estimated_credits <= 0:
            raise InvalidCreditsError("estimated_credits must be greater than zero")

        action_id = storage.next_id(tx.session, storage.ACTION_IDS)
        action = EcoAction(
            id=action_id,
            company=caller,
            title=title.strip(),
            description=description or "",
            category=category or "",
            location=location or "",
            estimated_credits=estimated_credits,
            status=ActionStatus.SUBMITTED,
            outcome=ActionOutcome.PENDING,
            approval_count=0,
            rejection_count=0,
            actual_credits=0,
            awarded_credits=0,
            created_at=tx.now,
        )
        tx.session.add(action)
        profile = _profile(tx.session, caller)
        profile.total_actions += 1
        profile.updated_at = tx.now

        tx.emit(EcoActionLogged(action_id=action_id, company=caller, title=action.title, category=action.category))
        logger.info(f"🌱 Eco action {action_id} logged by {caller} ({estimated_credits} credits estimated)")
        return action_id

    def batch_log_actions(self, tx: LedgerTransaction, caller: str, actions: Sequence[Dict[str, Any]]) -> List[int]:
        """Logs several actions in one transaction; one invalid entry rejects them all."""
        if not actions:
            raise InvalidArgumentError("actions must not be empty")
        return [
            self.log_eco_action(
                tx,
                caller,
                title=entry.get("title"),
                description=entry.get("description", ""),
                estimated_credits=entry.get("estimated_credits"),
                location=entry.get("location", ""),
                category=entry.get("category", ""),
            )
            for entry in actions
        ]

    # ------------------------- Verification -------------------------
    def verify_action(
        self,
        tx: LedgerTransaction,
        caller: str,
        action_id: int,
        approved: bool,
        actual_credits: int,
        comments: str = "",
    ) -> Dict[str, Any]:
        access_control.require_role(tx.session, caller, Role.VERIFIER, Role.ADMIN)

        action = (
            tx.session.query(EcoAction)
            .filter_by(id=action_id)
            .with_for_update()
            .first()
        )
        if action is None:
            raise NotFoundError(f"Eco action {action_id} does not exist")
        if action.status == ActionStatus.VERIFIED:
            raise AlreadyFinalizedError(f"Eco action {action_id} is already finalized")
        if isinstance(actual_credits, bool) or not isinstance(actual_credits, int):
            raise InvalidCreditsError("actual_credits must be an integer")
        if actual_credits < 0 or (approved and actual_credits <= 0):
            raise InvalidCreditsError("actual_credits must be greater than zero for an approval")
        if tx.session.get(VerificationRecord, (action_id, caller)) is not None:
            raise AlreadyFinalizedError(f"{caller} already recorded a decision on action {action_id}")

        tx.session.add(VerificationRecord(
            action_id=action_id,
            verifier=caller,
            approved=bool(approved),
            actual_credits=actual_credits,
            comments=comments or "",
            recorded_at=tx.now,
        ))
        if approved:
            action.approval_count += 1
        else:
            action.rejection_count += 1
        tx.emit(ActionVerified(
            action_id=action_id, verifier=caller, approved=bool(approved), actual_credits=actual_credits
        ))
        logger.info(f"✅ Verifier {caller} {'approved' if approved else 'rejected'} action {action_id}")

        threshold = storage.get_setting(tx.session, storage.VERIFICATION_THRESHOLD)
        if action.approval_count + action.rejection_count >= threshold:
            self._finalize(tx, action)
        return action.to_dict()

    def _finalize(self, tx: LedgerTransaction, action: EcoAction) -> None:
        tx.session.flush()
        records = tx.session.query(VerificationRecord).filter_by(action_id=action.id).all()
        profile = _profile(tx.session, action.company)

        if any(not r.approved for r in records):
            action.outcome = ActionOutcome.REJECTED
            action.awarded_credits = 0
            profile.rejected_actions += 1
        else:
            action.outcome = ActionOutcome.APPROVED
            action.actual_credits = min(r.actual_credits for r in records)
            multiplier_bps = self.scoring.score(profile)
            awarded = action.actual_credits * ONE_CREDIT * multiplier_bps // BPS_DENOMINATOR
            action.awarded_credits = awarded
            if awarded > 0:
                credit_token.mint(tx, self.address, action.company, awarded)
                expiration_registry.record_batch(
                    tx, self.address, action.company, awarded, source_action_id=action.id
                )
            if awarded >= BADGE_AWARD_THRESHOLD:
                action.badge_id = badge_registry.safe_mint(
                    tx, self.address, action.company, source_action_id=action.id
                )
            profile.total_credits_earned = profile.total_credits_earned + awarded
            profile.verified_actions += 1
            profile.reputation_score = reputation_score(profile.total_credits_earned)

        action.status = ActionStatus.VERIFIED
        action.finalized_at = tx.now
        profile.updated_at = tx.now
        tx.emit(ActionFullyVerified(
            action_id=action.id,
            company=action.company,
            outcome=action.outcome.value,
            awarded=action.awarded_credits,
        ))
        tx.session.flush()
        leaderboard.record(tx, action.company)
        logger.info(
            f"🏁 Eco action {action.id} finalized as {action.outcome.value}; "
            f"{action.awarded_credits} awarded to {action.company}"
        )

    def set_verification_threshold(self, tx: LedgerTransaction, caller: str, threshold: int) -> None:
        require_owner(tx, caller)
        if isinstance(threshold, bool) or not isinstance(threshold, int) or threshold < 1:
            raise InvalidArgumentError("threshold must be an integer >= 1")
        storage.put_setting(tx.session, storage.VERIFICATION_THRESHOLD, threshold)
        tx.emit(ParameterUpdated(contract="verification", name="verification_threshold", value=str(threshold)))
        logger.info(f"Verification threshold set to {threshold}")

    # ------------------------- Reads -------------------------
    def get_action(self, session: Session, action_id: int) -> Dict[str, Any]:
        action = session.get(EcoAction, action_id)
        if action is None:
            raise NotFoundError(f"Eco action {action_id} does not exist")
        data = action.to_dict()
        data["verifications"] = [r.to_dict() for r in action.verifications]
        return data

    def get_verifications(self, session: Session, action_id: int) -> List[Dict[str, Any]]:
        return self.get_action(session, action_id)["verifications"]

    def action_count(self, session: Session) -> int:
        return storage.read_counter(session, storage.ACTION_IDS)

    def actions_of(self, session: Session, company: str) -> List[Dict[str, Any]]:
        company = normalize_address(company, "company")
        actions = session.query(EcoAction).filter_by(company=company).order_by(EcoAction.id.asc()).all()
        return [a.to_dict() for a in actions]

    def get_company_profile(self, session: Session, company: str) -> Dict[str, Any]:
        company = normalize_address(company, "company")
        profile = session.get(CompanyProfile, company)
        if profile is None:
            return CompanyProfile(
                address=company,
                total_credits_earned=0,
                total_actions=0,
                verified_actions=0,
                rejected_actions=0,
                reputation_score=0,
            ).to_dict()
        return profile.to_dict()

    def get_company_reputation(self, session: Session, company: str) -> int:
        return self.get_company_profile(session, company)["reputation_score"]


# Singleton instance
verification_ledger = VerificationLedger()
