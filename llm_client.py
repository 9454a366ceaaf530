"""
LLM client for ChatCalc
Calculator tool definitions, tool-call parsing and the HTTP calls to the LLM
"""
import logging

import requests

import config

logger = logging.getLogger("chatcalc.llm")


class LlmError(Exception):
    """Base class for LLM bridge failures"""


class LlmConfigurationError(LlmError):
    """Raised when the API key is missing"""


class LlmApiError(LlmError):
    def __init__(self, status_code, body):
        super().__init__(f"API request failed: {status_code} {body}")
        self.status_code = status_code
        self.body = body


def define_calculator_tools():
    """Tool definitions advertised to the LLM"""
    return [
        {
            'name': 'calculate',
            'description': 'Perform a calculation with two numbers',
            'input_schema': {
                'type': 'object',
                'properties': {
                    'num1': {
                        'type': 'number',
                        'description': 'The first number in the calculation'
                    },
                    'num2': {
                        'type': 'number',
                        'description': 'The second number in the calculation'
                    },
                    'operation': {
                        'type': 'string',
                        'enum': ['add', 'subtract', 'multiply', 'divide'],
                        'description': 'The operation to perform'
                    }
                },
                'required': ['num1', 'num2', 'operation']
            }
        },
        {
            'name': 'memory_store',
            'description': 'Store a value in calculator memory',
            'input_schema': {
                'type': 'object',
                'properties': {
                    'value': {
                        'type': 'number',
                        'description': 'The value to store in memory'
                    }
                },
                'required': ['value']
            }
        },
        {
            'name': 'memory_recall',
            'description': 'Recall the value from calculator memory',
            'input_schema': {'type': 'object', 'properties': {}}
        },
        {
            'name': 'memory_clear',
            'description': 'Clear the calculator memory',
            'input_schema': {'type': 'object', 'properties': {}}
        },
    ]


def parse_function_calls(response):
    """Collect the tool_use blocks of a Messages API response"""
    calls = []
    content = response.get('content') if isinstance(response, dict) else None
    if not isinstance(content, list):
        return calls

    for block in content:
        if isinstance(block, dict) and block.get('type') == 'tool_use':
            calls.append({
                'name': block.get('name'),
                'arguments': block.get('input') or {},
            })
    return calls


def extract_text(response):
    """Join the text blocks of a Messages API response"""
    content = response.get('content') if isinstance(response, dict) else None
    if not isinstance(content, list):
        return ""
    parts = [block.get('text', '') for block in content
             if isinstance(block, dict) and block.get('type') == 'text']
    return "\n".join(p for p in parts if p)


def forward_to_anthropic(messages, tools, api_key=None, timeout=config.LLM_TIMEOUT):
    """Send a conversation straight to the Anthropic Messages API"""
    api_key = api_key or config.get_api_key()
    if not api_key:
        raise LlmConfigurationError("API key not configured")

    headers = {
        'Content-Type': 'application/json',
        'x-api-key': api_key,
        'anthropic-version': config.ANTHROPIC_VERSION,
    }
    payload = {
        'model': config.ANTHROPIC_MODEL,
        'max_tokens': config.LLM_MAX_TOKENS,
        'messages': messages,
        'tools': tools,
    }

    logger.debug("Forwarding %d message(s) to %s", len(messages), config.ANTHROPIC_API_URL)
    response = requests.post(config.ANTHROPIC_API_URL, headers=headers, json=payload, timeout=timeout)
    if not response.ok:
        logger.warning("Anthropic API returned %s", response.status_code)
        raise LlmApiError(response.status_code, response.text)
    return response.json()


class LlmClient:
    """Talks to the LLM through the ChatCalc proxy endpoint (/api/llm)"""

    def __init__(self, proxy_url=config.LLM_PROXY_URL, timeout=config.LLM_TIMEOUT):
        self.proxy_url = proxy_url
        self.timeout = timeout

    def send(self, messages, tools=None):
        if tools is None:
            tools = define_calculator_tools()
        response = requests.post(
            self.proxy_url,
            json={'messages': messages, 'tools': tools},
            timeout=self.timeout,
        )
        if not response.ok:
            raise LlmApiError(response.status_code, response.text)
        return response.json()
