# models/request.py

from datetime import date as Date, datetime, time
from typing import Annotated, Literal, Optional, Union
from pydantic import BaseModel, Field, computed_field, field_validator

from core.utils import parse_timestamp
from .enums import RequestStatus, RequestType


# -------------------------------------------------
# Approval / return record (written once per stage)
# -------------------------------------------------
class ApprovalRecord(BaseModel):
    user_id: str
    user_name: str
    timestamp: datetime
    notes: Optional[str] = None

    @field_validator("timestamp", mode="before")
    def normalize_timestamp(cls, v):
        return parse_timestamp(v)


# -------------------------------------------------
# Type-specific payloads (tagged by `type`)
# -------------------------------------------------
class RoomDetails(BaseModel):
    type: Literal["room"] = "room"
    room_id: str
    room_name: str
    start_time: time
    end_time: time


class EquipmentDetails(BaseModel):
    type: Literal["equipment"] = "equipment"
    equipment_id: str
    equipment_name: str
    quantity: int = Field(..., ge=1)


class PrintingDetails(BaseModel):
    type: Literal["printing"] = "printing"
    document_name: str
    page_count: int = Field(..., ge=1)
    copies: int = Field(..., ge=1)
    color_print: bool = False
    double_sided: bool = False
    pdf_file_name: Optional[str] = None


RequestDetails = Annotated[
    Union[RoomDetails, EquipmentDetails, PrintingDetails],
    Field(discriminator="type"),
]


# -------------------------------------------------
# Request envelope (Supabase → API response)
# -------------------------------------------------
class Request(BaseModel):
    id: str
    status: RequestStatus
    user_id: str
    user_name: str
    class_id: str
    class_name: str
    date: Date
    notes: Optional[str] = None
    signature: str
    details: RequestDetails

    admin_approval: Optional[ApprovalRecord] = None
    supervisor_approval: Optional[ApprovalRecord] = None
    return_info: Optional[ApprovalRecord] = None

    created_at: datetime
    updated_at: datetime

    @field_validator("created_at", "updated_at", mode="before")
    def normalize_timestamps(cls, v):
        return parse_timestamp(v)

    @computed_field
    @property
    def type(self) -> RequestType:
        return RequestType(self.details.type)


# -------------------------------------------------
# Submissions (form input; completeness checked by the service)
# -------------------------------------------------
class SubmissionBase(BaseModel):
    class_id: Optional[str] = None
    date: Optional[Date] = None
    notes: Optional[str] = None
    signature: Optional[str] = Field(None, description="Signature image as a data URL")


class RoomSubmission(SubmissionBase):
    type: Literal["room"]
    room_id: Optional[str] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None


class EquipmentSubmission(SubmissionBase):
    type: Literal["equipment"]
    equipment_id: Optional[str] = None
    quantity: Optional[int] = None


class PrintingSubmission(SubmissionBase):
    type: Literal["printing"]
    document_name: Optional[str] = None
    page_count: Optional[int] = None
    copies: Optional[int] = 1
    color_print: bool = False
    double_sided: bool = False
    pdf_file_name: Optional[str] = None


# The required `type` literal selects the variant
Submission = Union[RoomSubmission, EquipmentSubmission, PrintingSubmission]


# -------------------------------------------------
# Decisions
# -------------------------------------------------
class DecisionPayload(BaseModel):
    """Body for approve / reject / return. Rejections require notes."""
    notes: Optional[str] = Field(None, description="Reason or remark shown to the requester")
