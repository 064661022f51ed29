from __future__ import annotations

from dataclasses import dataclass
from typing import List, Mapping, Optional

from ensemble.catalog import CEILING_CAN, DEFAULT_CATALOG, PENDANT, FixtureSpec
from ensemble.errors import MalformedInputError
from ensemble.intent import Intent, classify_intent
from ensemble.metrics import ENERGY_CODE_LIMIT_W_PER_SQFT, cost_breakdown
from ensemble.mutation import DesignDelta, apply_delta, plan_delta
from ensemble.schema import Design, Room
from ensemble.units import round_half_up

HELP_TEXT = (
    "I can help you adjust the lighting design. You can ask me to add or remove fixtures, "
    "explain the design choices, or check energy efficiency."
)

_ADD_REPLIES = {
    PENDANT: "I'll add another pendant light for better task coverage.",
    CEILING_CAN: "Adding more recessed lights for improved general illumination.",
}
_REMOVE_REPLY = "I'll remove some fixtures to reduce the lighting intensity."
_EMPTY_REMOVE_REPLY = "There are no fixtures left to remove in this design."

_CHANGE_KINDS = ("user_added", "user_removed")


@dataclass(frozen=True)
class ChatResult:
    intent: Intent
    message: str
    design: Design
    delta: Optional[DesignDelta] = None

    @property
    def changed(self) -> bool:
        return self.delta is not None and not self.delta.is_empty


def explain_design(room: Room, design: Design, catalog: Mapping[str, FixtureSpec] = DEFAULT_CATALOG) -> str:
    lines: List[str] = [f"For this {room.type}, I designed the lighting based on these principles:", ""]
    lines.extend(design.reasoning_for("overall"))
    lines.append("")

    kinds = list(dict.fromkeys(f.kind for f in design.fixtures))
    for kind in kinds:
        group = [f for f in design.fixtures if f.kind == kind]
        spec = catalog.get(kind)
        description = spec.description if spec is not None else "Unlisted fixture"
        lines.append(f"**{kind}** ({len(group)}x): {description}")
        for entry in design.reasoning:
            if entry.fixture_kind == kind and entry.kind not in _CHANGE_KINDS:
                lines.append(f"- {entry.message}")
        for purpose in dict.fromkeys(f.purpose for f in group if f.purpose):
            lines.append(f"- {purpose}")
        lines.append("")

    untagged = [r.message for r in design.reasoning if r.fixture_kind is None and r.kind != "overall"]
    for message in untagged:
        lines.append(message)
    changes = [r.message for r in design.reasoning if r.kind in _CHANGE_KINDS]
    if changes:
        lines.append("Changes made in this session:")
        lines.extend(f"- {m}" for m in changes)
    return "\n".join(lines).strip() + "\n"


def cost_message(design: Design, catalog: Mapping[str, FixtureSpec] = DEFAULT_CATALOG) -> str:
    rows = cost_breakdown(design.fixtures, catalog)
    parts = [f"{kind}: ${round_half_up(row['cost'])}" for kind, row in rows.items()]
    breakdown = ", ".join(parts) if parts else "no fixtures"
    return f"The current design costs ${design.total_cost}. Breakdown: {breakdown}"


def energy_message(design: Design) -> str:
    m = design.metrics
    verdict = (
        "Meets energy code requirements."
        if m.meets_energy_code
        else f"Exceeds energy code limit of {ENERGY_CODE_LIMIT_W_PER_SQFT}W/sq.ft."
    )
    return f"Energy usage: {m.total_watts:.1f}W total, {m.watts_per_sqft:.2f}W per sq.ft. {verdict}"


def respond(
    message: str,
    room: Room,
    design: Design,
    catalog: Mapping[str, FixtureSpec] = DEFAULT_CATALOG,
) -> ChatResult:
    """Classify a chat message and produce the reply plus the (possibly updated) design."""
    if not isinstance(message, str) or not message.strip():
        raise MalformedInputError("Chat message must be a non-empty string")

    intent = classify_intent(message)
    if intent.mutates:
        delta = plan_delta(design, intent, room, catalog)
        updated = apply_delta(design, delta, room, catalog)
        if intent.kind == "add":
            reply = _ADD_REPLIES.get(str(intent.fixture_kind), f"Adding another {intent.fixture_kind}.")
        else:
            reply = _REMOVE_REPLY if not delta.is_empty else _EMPTY_REMOVE_REPLY
        return ChatResult(intent=intent, message=reply, design=updated, delta=delta)

    if intent.kind == "explain":
        reply = explain_design(room, design, catalog)
    elif intent.kind == "cost":
        reply = cost_message(design, catalog)
    elif intent.kind == "energy":
        reply = energy_message(design)
    else:
        reply = HELP_TEXT
    return ChatResult(intent=intent, message=reply, design=design)
