from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from enum import Enum

from accountability.schemas.goal import new_id, utcnow


class RequestStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


# --- Partner requests (embedded in the target user's record) ---
class PartnerRequest(BaseModel):
    id: str = Field(default_factory=new_id)
    from_user: str
    status: RequestStatus = RequestStatus.PENDING
    created_at: datetime = Field(default_factory=utcnow)

    @property
    def is_terminal(self) -> bool:
        return self.status != RequestStatus.PENDING


# --- Users (auth.users.id -> users.id) ---
class User(BaseModel):
    id: str
    name: str
    email: str
    score: int = 0
    accountability_partner: Optional[str] = None
    partner_requests: List[PartnerRequest] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow)
    version: int = 0

    def find_request(self, request_id: str) -> Optional[PartnerRequest]:
        for request in self.partner_requests:
            if request.id == request_id:
                return request
        return None


class PublicProfile(BaseModel):
    id: str
    name: str
    email: str
    score: int = 0

    @classmethod
    def of(cls, user: User) -> "PublicProfile":
        return cls(id=user.id, name=user.name, email=user.email, score=user.score)


class ProfileCreate(BaseModel):
    name: str
    email: str


class PartnerRequestOut(BaseModel):
    id: str
    from_user: Optional[PublicProfile]
    status: RequestStatus
    created_at: datetime


class PartnerResponse(BaseModel):
    status: RequestStatus
