from fastapi import APIRouter, Depends, Query
from accountability.schemas.user import PartnerResponse
from accountability.dependencies.auth import current_user_context
from accountability.services import partners

router = APIRouter()

# Search users for accountability partners
@router.get("/search")
def search_users(query: str = Query(""), context=Depends(current_user_context)):
    return partners.search_users(context["store"], context["user_id"], query)

# -------- Partner requests --------

@router.post("/partner-request/{user_id}")
def send_partner_request(user_id: str, context=Depends(current_user_context)):
    partners.send_request(context["store"], context["user_id"], user_id)
    return {"message": "Partner request sent"}

@router.get("/partner-requests")
def get_partner_requests(context=Depends(current_user_context)):
    return partners.list_partner_requests(context["store"], context["user_id"])

@router.patch("/partner-request/{request_id}")
def respond_to_partner_request(request_id: str, body: PartnerResponse, context=Depends(current_user_context)):
    request = partners.respond(context["store"], context["user_id"], request_id, body.status)
    return {"message": f"Request {request.status.value}"}

# Get partner's public goals
@router.get("/partner-goals")
def get_partner_goals(context=Depends(current_user_context)):
    return partners.list_partner_goals(context["store"], context["user_id"])
