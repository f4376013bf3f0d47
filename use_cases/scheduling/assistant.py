"""
Administrator Scheduling Assistant with Azure OpenAI.

Answers administrator questions about the schedule and performs changes
through tool calls:
- Natural language questions about agenda, patients and revenue
- Tool calls executed against the ScheduleStore
- Activity messages for every tool that ran
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from azure_client import AzureOpenAIClientManager, client_manager as default_client_manager
from config import settings

from .store import ScheduleStore
from .tool_status import get_tool_status
from .tools import SCHEDULING_TOOLS, execute_tool

logger = logging.getLogger(__name__)


SYSTEM_PROMPT = """You are the scheduling assistant of a medical clinic, talking to a clinic administrator.

Your role is to:
1. Answer questions about professionals, appointments, patients and revenue
2. Book, cancel and update appointments when the administrator asks
3. Summarize the monthly financial report and the operational overview

IMPORTANT GUIDELINES:
- Always use the available tools to get real data. Never make up appointments, ids or amounts.
- Appointment prices are fixed at booking time; do not recompute them.
- The schedule does not block double bookings. If a tool result contains warnings, tell the administrator.
- Confirm what you changed, with the appointment id.
- Be concise and answer in the administrator's language.
"""


@dataclass
class AssistantReply:
    """Reply of the assistant to one administrator message."""
    content: str
    activity: List[str] = field(default_factory=list)
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"content": self.content, "activity": self.activity, "error": self.error}


class ScheduleAssistant:
    """Chat assistant over the clinic schedule."""

    def __init__(
        self,
        store: ScheduleStore,
        client_manager: Optional[AzureOpenAIClientManager] = None,
        deployment: Optional[str] = None,
        max_tool_rounds: Optional[int] = None,
    ):
        self._store = store
        self._client_manager = client_manager or default_client_manager
        self._deployment = deployment or settings.azure_openai_deployment
        self._max_tool_rounds = max_tool_rounds or settings.assistant_max_tool_rounds

    def _system_prompt(self) -> str:
        """System prompt with the current date and roster."""
        now = datetime.now(self._store.tz)
        roster = "\n".join(
            f"- {p.id}: {p.name} ({p.specialty})"
            for p in self._store.data.professionals
        ) or "- (no professionals)"
        return (
            f"{SYSTEM_PROMPT}\n"
            f"Current date and time: {now.strftime('%Y-%m-%d %H:%M')} ({self._store.tz})\n"
            f"Professionals:\n{roster}\n"
        )

    def _run_tool_calls(self, tool_calls: List[Any], messages: List[Dict[str, Any]], activity: List[str]):
        """Execute tool calls and append their results to the conversation."""
        for tool_call in tool_calls:
            name = tool_call.function.name
            try:
                arguments = json.loads(tool_call.function.arguments or "{}")
            except json.JSONDecodeError:
                arguments = {}
                logger.warning(f"Invalid arguments for tool {name}: {tool_call.function.arguments}")

            logger.info(f"Assistant tool call: {name}({arguments})")
            result = execute_tool(self._store, name, arguments)
            activity.append(get_tool_status(name)[1])

            messages.append({
                "role": "tool",
                "tool_call_id": tool_call.id,
                "content": result,
            })

    async def process_message(
        self,
        message: str,
        conversation_history: Optional[List[Dict[str, Any]]] = None,
    ) -> AssistantReply:
        """Process an administrator message and return the assistant's reply."""
        if not self._client_manager.is_configured:
            return AssistantReply(content="", error="The AI assistant is not configured.")

        messages: List[Dict[str, Any]] = [{"role": "system", "content": self._system_prompt()}]
        if conversation_history:
            messages.extend(conversation_history)
        messages.append({"role": "user", "content": message})

        activity: List[str] = []
        try:
            client = await self._client_manager.get_client()
            response = await client.chat.completions.create(
                model=self._deployment,
                messages=messages,
                tools=SCHEDULING_TOOLS,
                tool_choice="auto",
            )
            assistant_message = response.choices[0].message

            rounds = 0
            while assistant_message.tool_calls and rounds < self._max_tool_rounds:
                rounds += 1
                messages.append({
                    "role": "assistant",
                    "content": assistant_message.content,
                    "tool_calls": [
                        {
                            "id": tc.id,
                            "type": "function",
                            "function": {
                                "name": tc.function.name,
                                "arguments": tc.function.arguments,
                            },
                        }
                        for tc in assistant_message.tool_calls
                    ],
                })
                self._run_tool_calls(assistant_message.tool_calls, messages, activity)

                response = await client.chat.completions.create(
                    model=self._deployment,
                    messages=messages,
                    tools=SCHEDULING_TOOLS,
                    tool_choice="auto",
                )
                assistant_message = response.choices[0].message

        except Exception as e:
            logger.error(f"Assistant error: {e}", exc_info=True)
            return AssistantReply(content="", activity=activity, error=f"Assistant error: {e}")

        return AssistantReply(content=assistant_message.content or "", activity=activity)
