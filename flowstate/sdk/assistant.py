"""
Water conservation chat assistant.

Wraps OpenAI chat completions with the FlowState conservation persona.
"""

import logging
from typing import Dict, List, Optional

from openai import OpenAI

from ..config.loader import AssistantConfig

logger = logging.getLogger(__name__)


BASE_INSTRUCTION = """You are "FlowState", a Water Conservation Specialist and Sustainability Guide.
Your tone is encouraging, knowledgeable, grounded, and calm.

Your goal is to help users understand their water footprint and provide actionable advice to reduce it.

Key facts you know:
- Average shower: 2.1 gallons per minute.
- Bath: 30-50 gallons.
- Washing machine: 15-45 gallons per load.
- Virtual water of a cotton t-shirt: ~700-1400 gallons.
- Beef: ~1800 gallons per pound.

When users ask for tips, give specific, high-impact advice (e.g., "Install a low-flow aerator," "Fix that dripping faucet," "Eat one less burger a week").
If they share their usage data, praise their efforts and suggest one improvement.
Keep answers concise (under 3-4 sentences) to fit the chat UI."""

USER_CONTEXT_INSTRUCTION = """IMPORTANT: You are currently talking to a logged-in user.
Here is their current personal water usage data, including calculated gallons per week.

Use the "gal/week" (gallons per week) figures to identify their BIGGEST impact areas.
Focus on the items with the highest gallon usage.
If their "Virtual Usage" is higher than "Direct Usage", mention that diet or shopping might be a better place to start than shorter showers.

USER DATA:
"""

ROLES = ("user", "assistant")


def build_system_instruction(user_context: Optional[str] = None) -> str:
    """System instruction, with the user's footprint appended when known."""
    if not user_context:
        return BASE_INSTRUCTION
    return f"{BASE_INSTRUCTION}\n\n{USER_CONTEXT_INSTRUCTION}{user_context}"


class WaterAssistant:
    """Chat assistant for water conservation advice.

    Holds no conversation state; callers pass the history on every call.
    API failures propagate to the caller.
    """

    def __init__(self, config: Optional[AssistantConfig] = None):
        """Initialize the assistant.

        Args:
            config: Assistant settings (defaults to AssistantConfig())
        """
        self.config = config or AssistantConfig()
        self.client = OpenAI()

    def ask(
        self,
        history: List[Dict[str, str]],
        message: str,
        user_context: Optional[str] = None
    ) -> str:
        """Send a message and return the assistant's reply.

        Args:
            history: Earlier turns as {"role": "user"|"assistant", "text": ...}
            message: New user message
            user_context: Footprint summary of the user, if logged in

        Returns:
            Reply text

        Raises:
            ValueError: If message is empty or history has an unknown role
            OpenAI API errors: Propagated without modification
        """
        if not message or not message.strip():
            raise ValueError("message is required and cannot be empty")

        messages = [{"role": "system", "content": build_system_instruction(user_context)}]
        messages.extend(self._history_messages(history))
        messages.append({"role": "user", "content": message})

        logger.debug("Sending %d messages to %s", len(messages), self.config.model)
        response = self.client.chat.completions.create(
            model=self.config.model,
            messages=messages,
            temperature=self.config.temperature
        )

        if not response.choices:
            raise ValueError("OpenAI response contained no choices")
        return response.choices[0].message.content or ""

    def _history_messages(self, history: List[Dict[str, str]]) -> List[Dict[str, str]]:
        if self.config.max_history == 0:
            return []
        recent = history[-self.config.max_history:]
        messages = []
        for turn in recent:
            role = turn.get("role")
            if role not in ROLES:
                raise ValueError(f"Unknown history role: {role}")
            messages.append({"role": role, "content": turn.get("text", "")})
        return messages
