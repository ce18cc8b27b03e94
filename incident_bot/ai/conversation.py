from incident_bot.ai.client import LLMClient
from incident_bot.ai.prompts import (
    CHAT_SYSTEM_PROMPT,
    RCA_SYSTEM_PROMPT,
    SUMMARY_SYSTEM_PROMPT,
    TIMELINE_SYSTEM_PROMPT,
)
from incident_bot.incidents.timeline import parse_slack_ts
from incident_bot.rca.renderer import format_timestamp


def format_conversation(messages: list[dict]) -> str:
    """Render Slack history oldest first as ``[time] user: text`` lines."""
    lines = []
    for msg in sorted(messages, key=lambda m: float(m.get("ts") or 0)):
        text = msg.get("text") or ""
        if not text:
            continue
        name = msg.get("user") or msg.get("username") or "unknown"
        ts = msg.get("ts")
        stamp = format_timestamp(parse_slack_ts(ts)) if ts else ""
        lines.append(f"[{stamp}] {name}: {text}")
    return "\n".join(lines)


async def reply_to_message(llm: LLMClient, text: str) -> str:
    return await llm.complete([{"role": "user", "content": text}], system=CHAT_SYSTEM_PROMPT)


async def _complete_over(llm: LLMClient, messages: list[dict], system: str) -> str:
    transcript = format_conversation(messages)
    return await llm.complete([{"role": "user", "content": transcript}], system=system)


async def summarize_conversation(llm: LLMClient, messages: list[dict]) -> str:
    return await _complete_over(llm, messages, SUMMARY_SYSTEM_PROMPT)


async def narrate_timeline(llm: LLMClient, messages: list[dict]) -> str:
    return await _complete_over(llm, messages, TIMELINE_SYSTEM_PROMPT)


async def generate_rca_report(llm: LLMClient, messages: list[dict]) -> str:
    return await _complete_over(llm, messages, RCA_SYSTEM_PROMPT)
