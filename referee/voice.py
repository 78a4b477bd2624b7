"""Maps recognised speech and remote tool calls onto referee commands."""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from referee.dispatcher import ADD_POINT, INTENTS, RESET_MATCH, UNDO_LAST_POINT, CommandDispatcher

logger = logging.getLogger(__name__)


SYSTEM_INSTRUCTION = """
You are the official referee of a padel match. Be professional and extremely selective.

LISTENING RULES:
1. Act ONLY when the user clearly says one of these commands: "Point blue", "Point red", "Undo", "Reset".
2. COMMAND MAPPING:
   - "Point blue" -> call addPoint({team: 'us'})
   - "Point red" -> call addPoint({team: 'them'})
   - "Undo" -> call undoLastPoint()
   - "Reset" -> call resetMatch()
3. Ignore any other sentence, technical comment or noise. If you are not 100% sure, do NOTHING.

VOICE RULES:
1. After a command the system returns the new score. Read it out loud IMMEDIATELY.
2. Example answers: "Fifteen love", "Killer point!", "Set Blue!".
3. Be extremely concise: only read the score.
4. Without a clear command stay completely silent.
"""

TOOL_DECLARATIONS = [
    {
        "name": ADD_POINT,
        "description": "Award a point to 'us' (blue) or 'them' (red)",
        "parameters": {
            "type": "OBJECT",
            "properties": {
                "team": {"type": "STRING", "enum": ["us", "them"]},
            },
            "required": ["team"],
        },
    },
    {
        "name": UNDO_LAST_POINT,
        "description": "Undo the last point",
        "parameters": {"type": "OBJECT", "properties": {}},
    },
    {
        "name": RESET_MATCH,
        "description": "Reset the whole match",
        "parameters": {"type": "OBJECT", "properties": {}},
    },
]

# Key: spoken phrase (normalized), Value: (intent, args)
COMMAND_PHRASES = {
    # Blue / us
    "point blue": (ADD_POINT, {"team": "us"}),
    "blue point": (ADD_POINT, {"team": "us"}),
    "punto blu": (ADD_POINT, {"team": "us"}),
    "blue": (ADD_POINT, {"team": "us"}),

    # Red / them
    "point red": (ADD_POINT, {"team": "them"}),
    "red point": (ADD_POINT, {"team": "them"}),
    "punto rosso": (ADD_POINT, {"team": "them"}),
    "red": (ADD_POINT, {"team": "them"}),

    # Undo
    "undo": (UNDO_LAST_POINT, {}),
    "annulla": (UNDO_LAST_POINT, {}),

    # Reset
    "reset": (RESET_MATCH, {}),
    "reset match": (RESET_MATCH, {}),
}


@dataclass(frozen=True)
class Command:
    intent: str
    args: Dict[str, Any] = field(default_factory=dict)


class CommandParser:
    """Turns a transcript into a Command, or None when it is not a command."""

    def normalize_text(self, text: str) -> str:
        text = text.lower().strip()
        # Remove punctuation
        text = re.sub(r'[^\w\s]', '', text)
        # Collapse multiple spaces
        text = re.sub(r'\s+', ' ', text)
        return text

    def parse(self, text: str) -> Optional[Command]:
        normalized = self.normalize_text(text)

        if normalized not in COMMAND_PHRASES:
            return None

        intent, args = COMMAND_PHRASES[normalized]
        return Command(intent=intent, args=dict(args))


def handle_tool_call(
    dispatcher: CommandDispatcher,
    name: str,
    args: Optional[Dict[str, Any]] = None,
    call_id: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Run a tool call from the remote recogniser and build the function
    response sent back to it. Unknown tools get an empty result.
    """
    if name not in INTENTS:
        logger.warning(f"Unknown tool call: {name!r}")
        result = ""
    else:
        result = dispatcher.dispatch(name, args) or ""

    return {
        "id": call_id,
        "name": name,
        "response": {"result": result},
    }
