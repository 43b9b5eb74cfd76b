"""Prompt construction for connection-request drafts."""

from dataclasses import dataclass, field
from typing import List, Optional

MAX_MESSAGE_CHARS = 250


@dataclass
class MessageContext:
    recipient_name: str
    recipient_school: Optional[str] = None
    recipient_company: Optional[str] = None
    sender_name: Optional[str] = None
    sender_title: Optional[str] = None
    sender_company: Optional[str] = None
    sender_interests: List[str] = field(default_factory=list)
    commonalities: List[str] = field(default_factory=list)
    tone: str = "professional"


def build_prompt(context: MessageContext) -> str:
    tone = context.tone or "professional"
    lines = [f"Write a {tone} LinkedIn connection request message.", ""]

    sender = f"From: {context.sender_name or 'User'}"
    if context.sender_title:
        sender += f", {context.sender_title}"
    if context.sender_company:
        sender += f" at {context.sender_company}"
    lines.append(sender)

    recipient = f"To: {context.recipient_name}"
    if context.recipient_school:
        recipient += f" ({context.recipient_school} alumni)"
    if context.recipient_company:
        recipient += f" at {context.recipient_company}"
    lines.extend([recipient, ""])

    if context.commonalities:
        lines.append("Verified commonalities (the only shared background you may mention):")
        lines.extend(f"- {c}" for c in context.commonalities)
    else:
        lines.append("Verified commonalities: none. Do not claim any shared school, employer or history.")
    lines.append("")

    if context.sender_interests:
        lines.extend([f"Sender's interests/focus: {', '.join(context.sender_interests)}", ""])

    style = "Professional but warm" if tone == "professional" else "Friendly and approachable"
    lead = (
        "Lead with the commonality naturally"
        if context.commonalities
        else "Focus on the recipient's background and the sender's interests"
    )
    lines.extend([
        "Requirements:",
        f"- Maximum {MAX_MESSAGE_CHARS} characters (strict LinkedIn connection request limit)",
        f"- {style} tone",
        f"- {lead}",
        "- Only assert the verified commonalities listed above; never invent shared history",
        "- Include a subtle reason to connect",
        '- No generic phrases like "I came across your profile"',
        "- Do NOT use emojis",
        "- Return only the message text",
    ])
    return "\n".join(lines)


def fallback_message(name: str, school: str) -> str:
    """Template used when generation fails. States no shared background."""
    return (
        f"Hi {name}, I noticed you studied at {school} and would love to "
        "connect and hear about your experience."
    )
