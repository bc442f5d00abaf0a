"""System prompts and tool definitions sent to the AI gateway."""

from typing import Any, Dict, Optional

from .schemas import AssistantKind

CALL_SHEET_SYSTEM_PROMPT = (
    "You are an expert at extracting structured data from film production call sheets.\n"
    "Extract ALL information available from the call sheet. Be thorough and accurate.\n"
    "For missing fields, use null. Extract complete information for all sections: "
    "general info, scenes, cast, crew, and background."
)

SHOT_SYSTEM_PROMPT = (
    "You are a cinematography expert helping parse shot descriptions into structured data.\n"
    "Extract detailed information from natural language descriptions using proper "
    "cinematography terminology. If a detail isn't mentioned, leave the field empty so the "
    "existing value is kept. Never return placeholder text; either skip the field or give a "
    "concrete suggestion grounded in the shot's context."
)

_STRING = {"type": "string"}
_STRING_LIST = {"type": "array", "items": _STRING}


def _props(*names: str) -> Dict[str, Any]:
    return {name: dict(_STRING) for name in names}


CALL_SHEET_TOOL: Dict[str, Any] = {
    "type": "function",
    "function": {
        "name": "extract_call_sheet",
        "description": "Extract call sheet data into structured format with all sections",
        "parameters": {
            "type": "object",
            "properties": {
                **_props(
                    "production_company",
                    "project_name",
                    "shoot_date",
                    "day_number",
                    "script_color",
                    "schedule_color",
                    "general_crew_call",
                    "shooting_call",
                    "lunch_time",
                    "courtesy_breakfast_time",
                    "wrap_time",
                    "director",
                    "associate_director",
                    "line_producer",
                    "upm",
                    "production_office_address",
                    "shooting_location",
                    "location_address",
                    "crew_parking",
                    "basecamp",
                    "nearest_hospital",
                    "hospital_address",
                    "weather_description",
                    "high_temp",
                    "low_temp",
                    "sunrise_time",
                    "sunset_time",
                    "dawn_time",
                    "twilight_time",
                ),
                "executive_producers": _STRING_LIST,
                "producers": _STRING_LIST,
                "scenes": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            **_props(
                                "scene_number",
                                "pages",
                                "set_description",
                                "day_night",
                                "notes",
                                "location",
                            ),
                            "cast_ids": _STRING_LIST,
                        },
                        "required": ["scene_number", "set_description"],
                    },
                },
                "cast": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": _props(
                            "cast_id",
                            "character_name",
                            "actor_name",
                            "status",
                            "pickup_time",
                            "call_time",
                            "set_ready_time",
                            "special_instructions",
                        ),
                        "required": ["character_name", "actor_name"],
                    },
                },
                "crew": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": _props("department", "title", "name", "call_time"),
                        "required": ["title", "name"],
                    },
                },
                "background": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "quantity": {"type": "number"},
                            **_props("description", "call_time", "notes"),
                        },
                        "required": ["description"],
                    },
                },
            },
            "required": ["production_company", "project_name", "shoot_date"],
        },
    },
}

SHOT_TOOL: Dict[str, Any] = {
    "type": "function",
    "function": {
        "name": "parse_shot_details",
        "description": "Parse natural language shot description into structured cinematography fields",
        "parameters": {
            "type": "object",
            "properties": {
                **_props(
                    "visualDescription",
                    "location",
                    "action",
                    "shotType",
                    "cameraAngle",
                    "lighting",
                    "emotionalTone",
                    "keyProps",
                    "duration",
                ),
                "characters": _STRING_LIST,
            },
            "required": [],
        },
    },
}

_ASSISTANT_PROMPTS = {
    AssistantKind.CONTRACT: (
        "You are an expert assistant on SAG-AFTRA contracts and union agreements for film "
        "and television. You know the theatrical tiers (Micro-Budget, Student, Ultra Low "
        "Budget, Modified Low Budget, Low Budget, Basic Agreement), television and new media "
        "agreements, short project agreements, pension and health contributions, the "
        "signatory process, performer requirements and special provisions such as nudity "
        "riders, stunts, intimacy coordination and minors.\n"
        "Ask clarifying questions about budget, project type, runtime and cast size, "
        "recommend the most appropriate agreement, and explain obligations and estimated "
        "costs. Rates change annually: always tell the user to verify them with SAG-AFTRA "
        "and note this is educational information, not legal advice."
    ),
    AssistantKind.DISTRIBUTION: (
        "You are a film distribution expert helping filmmakers prepare projects for "
        "distribution. You cover distribution models (SVOD, TVOD, AVOD, FAST, theatrical), "
        "business packaging (loglines, synopses, comps, press kits), legal requirements "
        "(chain of title, E&O insurance, music clearances, releases), technical deliverables "
        "(master formats, audio specs, captions, M&E tracks, textless elements, QC) and "
        "platform or sales agent strategy.\n"
        "Be concise, practical and specific. Give concrete examples when suggesting loglines "
        "or synopses and relate advice to the filmmaker's situation when context is given."
    ),
    AssistantKind.FUNDING: (
        "You are an independent film funding strategist. You cover grants and fellowships, "
        "crowdfunding platforms and campaign strategy, tax incentives and co-production "
        "treaties, private investors and equity structures, pre-sales and gap financing, "
        "recoupment waterfalls and pitch materials.\n"
        "Be specific and actionable, adjust recommendations to the project's budget tier and "
        "timeline, and be encouraging but realistic. Use markdown formatting for clarity."
    ),
}

_RESPONSE_STYLE = (
    "\n\nRESPONSE STYLE:\n"
    "- Be conversational but professional\n"
    "- Use headers and bullet points when helpful\n"
    "- If you don't know something, say so and point to official resources"
)


def assistant_system_prompt(
    kind: AssistantKind, project_details: Optional[Dict[str, Any]] = None
) -> str:
    """Assistant prompt with the caller's project details appended as context."""
    prompt = _ASSISTANT_PROMPTS[kind]
    if project_details:
        lines = [
            f"- {key.replace('_', ' ').capitalize()}: {value}"
            for key, value in project_details.items()
            if value not in (None, "")
        ]
        if lines:
            prompt += (
                "\n\nCURRENT PROJECT DETAILS:\n"
                + "\n".join(lines)
                + "\nBased on these details, provide tailored recommendations."
            )
    return prompt + _RESPONSE_STYLE


def call_sheet_user_prompt(text: str) -> str:
    return f"Extract all information from this call sheet:\n\n{text}"


def shot_user_prompt(prompt: str, existing_shot_json: Optional[str]) -> str:
    parts = [f'Parse this shot description: "{prompt}"']
    if existing_shot_json:
        parts.append(f"Existing shot data for context:\n{existing_shot_json}")
    parts.append(
        "Extract and update ONLY the information that is clearly mentioned or can be "
        "intelligently inferred from the description."
    )
    return "\n\n".join(parts)
