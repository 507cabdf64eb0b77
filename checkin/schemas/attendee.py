import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field

Gender = Literal["Male", "Female"]


# --- Registration form (Input) ---
class AttendeeRegistration(BaseModel):
    first_name: str = Field("", max_length=100, examples=["Juan"])
    last_name: str = Field("", max_length=100, examples=["Dela Cruz"])
    has_mobile_number: bool = True
    contact_number: str = Field("", max_length=20, examples=["+639123456789"])
    email: Optional[str] = Field(None, max_length=255)
    birthday: Optional[datetime.date] = None
    school_name: str = Field("", max_length=200)
    barangay: str = Field("", max_length=100)
    city: str = Field("", max_length=100)
    social_media_name: Optional[str] = Field(None, max_length=200)
    gender: Optional[Gender] = None
    is_dgroup_member: bool = False
    dgroup_leader_name: Optional[str] = Field(None, max_length=200)


# --- Read Schema (Output) ---
class AttendeeRead(BaseModel):
    id: str
    first_name: str
    last_name: str
    contact_number: Optional[str] = None
    email: Optional[str] = None
    birthday: Optional[datetime.date] = None
    school_name: str = ""
    barangay: str = ""
    city: str = ""
    social_media_name: Optional[str] = None
    gender: Gender
    is_dgroup_member: bool = False
    dgroup_leader_name: Optional[str] = None
    is_first_timer: bool = False
    facilitator_id: Optional[str] = None
    created_at: Optional[datetime.datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @computed_field
    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class SearchResult(BaseModel):
    id: str
    first_name: str
    last_name: str
    contact_number: Optional[str] = None
    full_name: str


class FacilitatorAssignment(BaseModel):
    # None unassigns the attendee
    facilitator_id: Optional[str] = None
