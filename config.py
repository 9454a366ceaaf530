"""
ChatCalc Configuration Settings
"""
import os

# Application Settings
APP_NAME = "ChatCalc Calculator"
VERSION = "1.0.0"

# Display Settings
WINDOW_WIDTH = 360
WINDOW_HEIGHT = 520
DISPLAY_FONT = ("Consolas", 28, "bold")   # LCD/segmented-style font
BUTTON_FONT = ("Segoe UI", 14)
LABEL_FONT = ("Segoe UI", 11)

# ── Palettes ───────────────────────────────────────────────────────────────────
# Keys are read by gui.ChatCalcGUI; the memory keys also colour the chat button.

NEU_LIGHT = {
    "bg":           "#DDE6ED",
    "bg_dark":      "#C8D4DF",
    "shadow_dark":  "#B2BFC8",
    "shadow_lite":  "#FFFFFF",
    "display_bg":   "#C8D4DF",
    "display_fg":   "#1A2332",
    "btn_bg":       "#DDE6ED",
    "btn_fg":       "#2B3A4A",
    "operator_fg":  "#1E7A56",
    "equals_bg":    "#2E8B57",
    "equals_fg":    "#FFFFFF",
    "memory_bg":    "#C8D4DF",
    "memory_fg":    "#2C5F8A",
    "accent":       "#2E8B57",
    "subtext":      "#6E8090",
    "danger":       "#B03A2E",   # error text and the C key
}

NEU_DARK = {
    "bg":           "#1E2530",
    "bg_dark":      "#161C26",
    "shadow_dark":  "#10161E",
    "shadow_lite":  "#283040",
    "display_bg":   "#161C26",
    "display_fg":   "#9ADDB0",
    "btn_bg":       "#1E2530",
    "btn_fg":       "#BDD0E0",
    "operator_fg":  "#4DB888",
    "equals_bg":    "#2D8A58",
    "equals_fg":    "#FFFFFF",
    "memory_bg":    "#283040",
    "memory_fg":    "#5E8FC8",
    "accent":       "#4DB888",
    "subtext":      "#4E6070",
    "danger":       "#E55A4E",
}


def get_theme(dark: bool) -> dict:
    """Return the active neumorphic colour palette."""
    return NEU_DARK if dark else NEU_LIGHT


# Calculator Settings
MAX_DIGITS = 15            # significant digits accepted while typing
ERROR_PREFIX = "Error"     # every error marker on the display starts with this
MEMORY_INITIAL_VALUE = 0.0

# History Settings
MAX_HISTORY_ITEMS = 100
CHAT_HISTORY_LIMIT = 10

# Web API settings
WEB_HOST = os.environ.get("CHATCALC_HOST", "0.0.0.0")
WEB_PORT = int(os.environ.get("CHATCALC_PORT", "8888"))
LLM_PROXY_URL = os.environ.get("CHATCALC_LLM_PROXY_URL", f"http://localhost:{WEB_PORT}/api/llm")

# Anthropic settings
ANTHROPIC_API_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_VERSION = "2023-06-01"
ANTHROPIC_MODEL = os.environ.get("ANTHROPIC_MODEL", "claude-3-haiku-20240307")
LLM_MAX_TOKENS = 1024
LLM_TIMEOUT = 30   # seconds


def get_api_key():
    """Read the Anthropic key at call time; None when unset."""
    return os.environ.get("ANTHROPIC_API_KEY") or None
