"""Request and result schemas for the AI tools.

Results coming back from the gateway are validated into these models before use; a
payload that doesn't fit is reported as an upstream service error.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class AssistantKind(str, Enum):
    CONTRACT = "contract"
    DISTRIBUTION = "distribution"
    FUNDING = "funding"


# ==================== Requests ====================


class CallSheetParseRequest(BaseModel):
    text: str


class ShotParseRequest(BaseModel):
    prompt: str
    existing_shot: Optional[Dict[str, Any]] = None


class ChatMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str = Field(min_length=1)


class AssistantChatRequest(BaseModel):
    messages: List[ChatMessage]
    project_details: Optional[Dict[str, Any]] = None


# ==================== Call sheet ====================


class CallSheetScene(BaseModel):
    scene_number: str
    set_description: str
    pages: Optional[str] = None
    day_night: Optional[str] = None
    cast_ids: List[str] = Field(default_factory=list)
    notes: Optional[str] = None
    location: Optional[str] = None


class CallSheetCastMember(BaseModel):
    character_name: str
    actor_name: str
    cast_id: Optional[str] = None
    status: Optional[str] = None
    pickup_time: Optional[str] = None
    call_time: Optional[str] = None
    set_ready_time: Optional[str] = None
    special_instructions: Optional[str] = None


class CallSheetCrewMember(BaseModel):
    title: str
    name: str
    department: Optional[str] = None
    call_time: Optional[str] = None


class CallSheetBackground(BaseModel):
    description: str
    quantity: Optional[float] = None
    call_time: Optional[str] = None
    notes: Optional[str] = None


class CallSheetData(BaseModel):
    production_company: Optional[str] = None
    project_name: Optional[str] = None
    shoot_date: Optional[str] = None
    day_number: Optional[str] = None
    script_color: Optional[str] = None
    schedule_color: Optional[str] = None
    general_crew_call: Optional[str] = None
    shooting_call: Optional[str] = None
    lunch_time: Optional[str] = None
    courtesy_breakfast_time: Optional[str] = None
    wrap_time: Optional[str] = None
    executive_producers: List[str] = Field(default_factory=list)
    producers: List[str] = Field(default_factory=list)
    director: Optional[str] = None
    associate_director: Optional[str] = None
    line_producer: Optional[str] = None
    upm: Optional[str] = None
    production_office_address: Optional[str] = None
    shooting_location: Optional[str] = None
    location_address: Optional[str] = None
    crew_parking: Optional[str] = None
    basecamp: Optional[str] = None
    nearest_hospital: Optional[str] = None
    hospital_address: Optional[str] = None
    weather_description: Optional[str] = None
    high_temp: Optional[str] = None
    low_temp: Optional[str] = None
    sunrise_time: Optional[str] = None
    sunset_time: Optional[str] = None
    dawn_time: Optional[str] = None
    twilight_time: Optional[str] = None
    scenes: List[CallSheetScene] = Field(default_factory=list)
    cast: List[CallSheetCastMember] = Field(default_factory=list)
    crew: List[CallSheetCrewMember] = Field(default_factory=list)
    background: List[CallSheetBackground] = Field(default_factory=list)


class CallSheetParseResult(BaseModel):
    data: CallSheetData
    warnings: List[str] = Field(default_factory=list)


# ==================== Shots ====================


class ShotDetails(BaseModel):
    """Shot fields, serialized in camelCase for the storyboard editor."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    visual_description: Optional[str] = None
    location: Optional[str] = None
    action: Optional[str] = None
    shot_type: Optional[str] = None
    camera_angle: Optional[str] = None
    lighting: Optional[str] = None
    emotional_tone: Optional[str] = None
    key_props: Optional[str] = None
    characters: Optional[List[str]] = None
    duration: Optional[str] = None


class ShotParseResult(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    parsed_shot: Dict[str, Any]
