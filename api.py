"""
Flask REST API for ChatCalc
Exposes the calculator, the chat bot and the LLM proxy as JSON endpoints
"""
import logging

from flask import Flask, jsonify, request
from flask_cors import CORS

import config
from chatbot import ChatBot
from controller import CalculatorController
from llm_client import LlmApiError, LlmConfigurationError, LlmClient, forward_to_anthropic
from logging_config import setup_logging

logger = logging.getLogger("chatcalc.api")

app = Flask(__name__)
CORS(app)  # Enable CORS for all routes

# Initialize components
controller = CalculatorController()
chatbot = ChatBot(controller)


@app.route('/')
@app.route('/api')
def api_info():
    """API information page"""
    return """
    <html>
    <head><title>ChatCalc API</title></head>
    <body style="font-family: Arial; padding: 40px; background: #1a1a2e; color: white;">
        <h1>ChatCalc API Server</h1>
        <h2>Available Endpoints:</h2>
        <ul>
            <li><a href="/api/calculator" style="color: #2196F3;">GET /api/calculator</a> - Calculator display and memory</li>
            <li>POST /api/calculator/press - Press a calculator button ({"key": "7"})</li>
            <li><a href="/api/calculations" style="color: #2196F3;">GET /api/calculations</a> - Calculation history</li>
            <li>DELETE /api/calculations - Clear calculation history</li>
            <li>POST /api/chat - Chat with the calculator ({"message": "calculate 2 + 2"})</li>
            <li>POST /api/llm - LLM proxy ({"messages": [...], "tools": [...]})</li>
        </ul>
    </body>
    </html>
    """


@app.route('/api/calculator')
def get_calculator():
    """Get the calculator display, error state and memory"""
    try:
        return jsonify({'success': True, 'data': controller.snapshot()})
    except Exception as e:
        logger.exception("Failed to read calculator state")
        return jsonify({'success': False, 'error': str(e)}), 500


@app.route('/api/calculator/press', methods=['POST'])
def press_button():
    """Press a calculator button"""
    payload = request.get_json(silent=True) or {}
    key = payload.get('key')
    if not isinstance(key, str) or not key:
        return jsonify({'success': False, 'error': "Missing 'key'"}), 400

    try:
        controller.press(key)
        return jsonify({'success': True, 'data': controller.snapshot()})
    except ValueError as e:
        return jsonify({'success': False, 'error': str(e)}), 400
    except Exception as e:
        logger.exception("Failed to press %r", key)
        return jsonify({'success': False, 'error': str(e)}), 500


@app.route('/api/calculations')
def get_calculations():
    """Get calculation history"""
    try:
        limit = int(request.args.get('limit', 50))
        if limit < 0:
            raise ValueError(limit)
        calculations = controller.history.get_calculation_history(limit=limit)

        formatted = []
        for c in calculations:
            formatted.append({
                'expression': c[0],
                'result': c[1],
                'timestamp': c[2]
            })

        return jsonify({
            'success': True,
            'data': formatted,
            'count': len(formatted)
        })
    except ValueError:
        return jsonify({'success': False, 'error': "'limit' must be a non-negative integer"}), 400
    except Exception as e:
        logger.exception("Failed to read calculation history")
        return jsonify({'success': False, 'error': str(e)}), 500


@app.route('/api/calculations', methods=['DELETE'])
def clear_calculations():
    """Clear calculation history"""
    controller.history.clear_calculation_history()
    return jsonify({'success': True})


@app.route('/api/chat', methods=['POST'])
def chat():
    """Send a chat message to the calculator bot"""
    payload = request.get_json(silent=True) or {}
    message = payload.get('message')
    if not isinstance(message, str) or not message.strip():
        return jsonify({'success': False, 'error': "Missing 'message'"}), 400

    try:
        reply = chatbot.process_message(message)
        return jsonify({
            'success': True,
            'data': {
                'reply': reply,
                'display': controller.display()
            }
        })
    except Exception as e:
        logger.exception("Chat request failed")
        return jsonify({'success': False, 'error': str(e)}), 500


@app.route('/api/llm', methods=['POST'])
def llm_proxy():
    """Forward a conversation to Anthropic with the server-side API key"""
    payload = request.get_json(silent=True) or {}
    messages = payload.get('messages') or []
    tools = payload.get('tools') or []

    try:
        return jsonify(forward_to_anthropic(messages, tools))
    except LlmConfigurationError:
        return jsonify({'error': 'API key not configured'}), 500
    except LlmApiError as e:
        return jsonify({'error': f'API request failed: {e.body}'}), e.status_code
    except Exception as e:
        logger.exception("Error in API proxy")
        return jsonify({'error': str(e)}), 500


def enable_llm_chat(proxy_url=config.LLM_PROXY_URL):
    """Route chat messages through the LLM instead of the pattern matcher"""
    chatbot.llm_client = LlmClient(proxy_url)


if __name__ == '__main__':
    setup_logging()
    if config.get_api_key():
        enable_llm_chat()

    print("\n" + "="*60)
    print("ChatCalc API Server")
    print("="*60)
    print(f"Server starting on http://{config.WEB_HOST}:{config.WEB_PORT}")
    print(f"Access from this device: http://localhost:{config.WEB_PORT}")
    if config.WEB_HOST == '0.0.0.0':
        print(f"Access from network: http://<your-ip>:{config.WEB_PORT}")
    print(f"LLM chat: {'enabled' if chatbot.llm_client else 'disabled (set ANTHROPIC_API_KEY)'}")
    print("="*60 + "\n")

    app.run(host=config.WEB_HOST, port=config.WEB_PORT, debug=False)
