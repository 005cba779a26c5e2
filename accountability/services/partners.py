import logging
from datetime import datetime
from typing import List, Optional

from accountability.errors import (
    DomainError,
    DuplicateRequestError,
    NotFoundError,
    RequestResolvedError,
    ServerFault,
    ValidationError,
)
from accountability.schemas.goal import Goal, utcnow
from accountability.schemas.user import (
    PartnerRequest,
    PartnerRequestOut,
    ProfileCreate,
    PublicProfile,
    RequestStatus,
    User,
)
from accountability.services.versioned import retry_on_conflict

logger = logging.getLogger(__name__)


# -------- Profiles --------

def get_profile(store, user_id: str) -> User:
    user = store.get_user(user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


def register_profile(store, user_id: str, data: ProfileCreate, now: Optional[datetime] = None) -> User:
    existing = store.get_user(user_id)
    if existing is not None:
        return existing

    name = (data.name or "").strip()
    email = (data.email or "").strip()
    if not name or not email:
        raise ValidationError("Please provide all required fields")
    if "@" not in email:
        raise ValidationError("Please provide a valid email")
    if store.find_user_by_email(email) is not None:
        raise ValidationError("User already exists")

    user = store.create_user(User(id=user_id, name=name, email=email, created_at=now or utcnow()))
    logger.info(f"Registered profile for user {user_id}")
    return user


def search_users(store, excluding_user_id: str, query: str) -> List[PublicProfile]:
    query = (query or "").strip()
    if not query:
        return []
    return [PublicProfile.of(u) for u in store.search_users(excluding_user_id, query)]


# -------- Partner requests --------

def send_request(store, from_user_id: str, to_user_id: str, now: Optional[datetime] = None) -> PartnerRequest:
    if from_user_id == to_user_id:
        raise ValidationError("Cannot send a partner request to yourself")
    get_profile(store, from_user_id)
    now = now or utcnow()

    def apply():
        target = get_profile(store, to_user_id)
        if any(r.from_user == from_user_id for r in target.partner_requests):
            raise DuplicateRequestError("Request already sent")

        expected_version = target.version
        request = PartnerRequest(from_user=from_user_id, created_at=now)
        target.partner_requests.append(request)
        store.save_user(target, expected_version)
        return request

    request = retry_on_conflict(apply, f"Partner request {from_user_id} -> {to_user_id}")
    logger.info(f"Partner request {request.id} sent from {from_user_id} to {to_user_id}")
    return request


def list_partner_requests(store, user_id: str) -> List[PartnerRequestOut]:
    user = get_profile(store, user_id)
    results = []
    for request in user.partner_requests:
        requester = store.get_user(request.from_user)
        results.append(PartnerRequestOut(
            id=request.id,
            from_user=PublicProfile.of(requester) if requester else None,
            status=request.status,
            created_at=request.created_at,
        ))
    return results


def _coerce_decision(decision) -> RequestStatus:
    try:
        decision = RequestStatus(decision)
    except ValueError:
        raise ValidationError("Status must be 'accepted' or 'rejected'")
    if decision == RequestStatus.PENDING:
        raise ValidationError("Status must be 'accepted' or 'rejected'")
    return decision


def respond(store, to_user_id: str, request_id: str, decision) -> PartnerRequest:
    """
    Accept or reject a pending partner request addressed to to_user_id.

    Acceptance links both users. The responder's record (request status and
    partner) is written first, then the requester's partner field; if the
    second write fails, the first is reverted so the link is never left
    pointing one way.
    """
    decision = _coerce_decision(decision)

    def resolve():
        user = get_profile(store, to_user_id)
        request = user.find_request(request_id)
        if request is None:
            raise NotFoundError("Request not found")
        if request.is_terminal:
            raise RequestResolvedError(f"Request already {request.status.value}")

        expected_version = user.version
        previous_partner = user.accountability_partner
        request.status = decision
        if decision == RequestStatus.ACCEPTED:
            user.accountability_partner = request.from_user
        store.save_user(user, expected_version)
        return request, previous_partner

    request, previous_partner = retry_on_conflict(resolve, f"Response to partner request {request_id}")
    logger.info(f"Partner request {request_id} {decision.value} by {to_user_id}")

    if decision == RequestStatus.ACCEPTED:
        if previous_partner and previous_partner != request.from_user:
            logger.warning(
                f"User {to_user_id} replaced partner {previous_partner} with {request.from_user}; "
                f"{previous_partner} is not unlinked"
            )
        _link_requester(store, to_user_id, request, previous_partner)

    return request


def _link_requester(store, to_user_id: str, request: PartnerRequest, previous_partner: Optional[str]):
    from_user_id = request.from_user

    def link():
        requester = get_profile(store, from_user_id)
        expected_version = requester.version
        if requester.accountability_partner and requester.accountability_partner != to_user_id:
            logger.warning(
                f"User {from_user_id} replaced partner {requester.accountability_partner} with {to_user_id}"
            )
        requester.accountability_partner = to_user_id
        store.save_user(requester, expected_version)

    try:
        retry_on_conflict(link, f"Partner link {from_user_id} -> {to_user_id}")
    except DomainError as e:
        logger.error(f"Linking {from_user_id} to {to_user_id} failed, reverting: {e.message}")
        _revert_acceptance(store, to_user_id, request.id, from_user_id, previous_partner)
        raise ServerFault("Partnership could not be established") from e

    logger.info(f"Users {to_user_id} and {from_user_id} are now accountability partners")


def _revert_acceptance(store, to_user_id: str, request_id: str, from_user_id: str, previous_partner: Optional[str]):
    def revert():
        user = get_profile(store, to_user_id)
        expected_version = user.version
        request = user.find_request(request_id)
        if request is not None:
            request.status = RequestStatus.PENDING
        if user.accountability_partner == from_user_id:
            user.accountability_partner = previous_partner
        store.save_user(user, expected_version)

    try:
        retry_on_conflict(revert, f"Revert of partner request {request_id}")
    except DomainError as e:
        logger.error(
            f"Revert of partner request {request_id} failed; "
            f"{to_user_id} still points at {from_user_id}: {e.message}"
        )
        raise


def list_partner_goals(store, user_id: str) -> List[Goal]:
    user = get_profile(store, user_id)
    if not user.accountability_partner:
        return []
    return store.list_goals(user.accountability_partner, public_only=True)
