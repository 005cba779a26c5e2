from fastapi import APIRouter, Depends
from accountability.schemas.user import ProfileCreate, PublicProfile
from accountability.dependencies.auth import current_user_context
from accountability.services import partners

router = APIRouter()

# Create the profile for an already-authenticated identity
@router.post("/profile", status_code=201)
def register_profile(profile: ProfileCreate, context=Depends(current_user_context)):
    user = partners.register_profile(context["store"], context["user_id"], profile)
    return PublicProfile.of(user)

@router.get("/me")
def get_me(context=Depends(current_user_context)):
    user = partners.get_profile(context["store"], context["user_id"])
    return {
        "user": PublicProfile.of(user),
        "accountability_partner": user.accountability_partner,
    }
