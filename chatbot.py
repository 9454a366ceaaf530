"""
Chatbot for ChatCalc
Turns chat messages or LLM tool calls into calculator commands
"""
import logging
import math
import re
from dataclasses import dataclass

import config
from calculator import Operation, format_number
from llm_client import LlmClient, LlmError, define_calculator_tools, extract_text, parse_function_calls

logger = logging.getLogger("chatcalc.chatbot")


# ── Commands ─────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Calculate:
    num1: float
    num2: float
    operation: Operation


@dataclass(frozen=True)
class MemoryStore:
    value: float


@dataclass(frozen=True)
class MemoryRecall:
    pass


@dataclass(frozen=True)
class MemoryClear:
    pass


@dataclass(frozen=True)
class Help:
    pass


@dataclass(frozen=True)
class Unknown:
    text: str = ""


HELP_TEXT = (
    "I can help with calculations. Try asking me things like:\n"
    "- Calculate 125 × 37\n"
    "- Store 42 in memory\n"
    "- Recall memory\n"
    "- Clear memory"
)
UNKNOWN_TEXT = ("I'm not sure how to help with that yet. Try asking me to calculate "
                "something, like 'Calculate 125 × 37'.")
ERROR_TEXT = "Sorry, I encountered an error processing your request."
DIVIDE_BY_ZERO_TEXT = "I can't divide by zero!"
NON_FINITE_TEXT = "That number is too large for me to work with."


# ── Intent extractors ────────────────────────────────────────────────────────

class IntentExtractor:
    """Turns some chat input into a list of commands"""

    def extract(self, source):
        raise NotImplementedError


_NUMBER = r'(-?\d+(?:\.\d*)?)'

SYMBOL_OPERATIONS = {
    '+': Operation.ADD,
    '-': Operation.SUBTRACT,
    '*': Operation.MULTIPLY,
    '×': Operation.MULTIPLY,
    '/': Operation.DIVIDE,
    '÷': Operation.DIVIDE,
}


class PatternIntentExtractor(IntentExtractor):
    CALCULATE_RE = re.compile(r'calculate\s+' + _NUMBER + r'\s*([+\-*/×÷])\s*' + _NUMBER, re.IGNORECASE)
    STORE_RE = re.compile(r'store\s+' + _NUMBER + r'\s+in\s+memory', re.IGNORECASE)
    RECALL_RE = re.compile(r"recall\s+memory|what'?s\s+in\s+memory", re.IGNORECASE)
    CLEAR_RE = re.compile(r'clear\s+memory', re.IGNORECASE)
    HELP_RE = re.compile(r'help|what can you do', re.IGNORECASE)

    def extract(self, source):
        message = source or ""

        match = self.CALCULATE_RE.search(message)
        if match:
            num1, symbol, num2 = match.groups()
            return [Calculate(float(num1), float(num2), SYMBOL_OPERATIONS[symbol])]

        match = self.STORE_RE.search(message)
        if match:
            return [MemoryStore(float(match.group(1)))]

        if self.RECALL_RE.search(message):
            return [MemoryRecall()]
        if self.CLEAR_RE.search(message):
            return [MemoryClear()]
        if self.HELP_RE.search(message):
            return [Help()]
        return [Unknown(message)]


class ToolCallIntentExtractor(IntentExtractor):
    """Reads parsed tool calls ({name, arguments}) into commands"""

    OPERATIONS = {
        'add': Operation.ADD,
        'subtract': Operation.SUBTRACT,
        'multiply': Operation.MULTIPLY,
        'divide': Operation.DIVIDE,
    }

    def extract(self, source):
        return [self._to_command(call) for call in source or []]

    def _to_command(self, call):
        name = call.get('name')
        args = call.get('arguments') or {}
        try:
            if name == 'calculate':
                operation = self.OPERATIONS[str(args['operation']).lower()]
                return Calculate(_finite(args['num1']), _finite(args['num2']), operation)
            if name == 'memory_store':
                return MemoryStore(_finite(args['value']))
        except (KeyError, TypeError, ValueError):
            logger.warning("Malformed tool call arguments for %s: %r", name, args)
            return Unknown(f"malformed {name} call")

        if name == 'memory_recall':
            return MemoryRecall()
        if name == 'memory_clear':
            return MemoryClear()
        logger.warning("Unsupported tool call: %r", name)
        return Unknown(f"unsupported tool {name}")


def _finite(value):
    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f"Not a finite number: {value!r}")
    return number


def format_chat_number(value):
    """Integers as-is, everything else to at most four decimals"""
    value = float(value)
    if value.is_integer():
        return format_number(value)
    return f"{value:.4f}".rstrip('0').rstrip('.')


# ── Chat bot ─────────────────────────────────────────────────────────────────

class ChatBot:
    def __init__(self, controller, extractor=None, llm_client=None, tool_extractor=None):
        self.controller = controller
        self.extractor = extractor or PatternIntentExtractor()
        self.llm_client = llm_client
        self.tool_extractor = tool_extractor or ToolCallIntentExtractor()
        self.history = []

    def add_message(self, content, role):
        """Record a chat turn, keeping only the most recent ones"""
        self.history.append({'role': role, 'content': content})
        if len(self.history) > config.CHAT_HISTORY_LIMIT:
            del self.history[:-config.CHAT_HISTORY_LIMIT]

    def process_message(self, message):
        """Handle one user message and return the assistant reply"""
        message = message.strip()
        self.add_message(message, 'user')
        try:
            if self.llm_client is not None:
                reply = self._ask_llm()
            else:
                reply = self._run(self.extractor.extract(message))
        except LlmError:
            logger.exception("LLM request failed")
            reply = ERROR_TEXT
        except Exception:
            logger.exception("Error processing chat message %r", message)
            reply = ERROR_TEXT
        self.add_message(reply, 'assistant')
        return reply

    def _ask_llm(self):
        response = self.llm_client.send(self._llm_messages(), define_calculator_tools())
        calls = parse_function_calls(response)
        if calls:
            return self._run(self.tool_extractor.extract(calls))
        return extract_text(response) or UNKNOWN_TEXT

    def _llm_messages(self):
        # The Messages API wants the conversation to open with a user turn
        messages = list(self.history)
        while messages and messages[0]['role'] != 'user':
            messages.pop(0)
        return messages

    def _run(self, commands):
        return "\n".join(self.dispatch(command) for command in commands) or UNKNOWN_TEXT

    def dispatch(self, command):
        """Execute one command against the calculator and describe the outcome"""
        state = self.controller.state

        if isinstance(command, Calculate):
            if not (math.isfinite(command.num1) and math.isfinite(command.num2)):
                return NON_FINITE_TEXT
            if command.operation is Operation.DIVIDE and command.num2 == 0:
                return DIVIDE_BY_ZERO_TEXT
            display = self.controller.apply_calculation(command.num1, command.operation, command.num2)
            if state.is_error:
                return f"I couldn't calculate that: {display}"
            return (f"The result of {format_chat_number(command.num1)} {command.operation.symbol} "
                    f"{format_chat_number(command.num2)} is {format_chat_number(display)}")

        if isinstance(command, MemoryStore):
            if not math.isfinite(command.value):
                return NON_FINITE_TEXT
            with self.controller.lock:
                state.memory_store(command.value)
            return f"I've stored {format_number(command.value)} in memory."

        if isinstance(command, MemoryRecall):
            with self.controller.lock:
                value = state.memory_recall()
            return f"The value in memory is {format_number(value)}."

        if isinstance(command, MemoryClear):
            with self.controller.lock:
                state.memory_clear()
            return "I've cleared the memory."

        if isinstance(command, Help):
            return HELP_TEXT

        return UNKNOWN_TEXT


def create_chatbot(controller, proxy_url=config.LLM_PROXY_URL):
    """Chat bot that asks the LLM when an Anthropic key is configured"""
    llm_client = LlmClient(proxy_url) if config.get_api_key() else None
    return ChatBot(controller, llm_client=llm_client)
