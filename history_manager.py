"""
History Manager for ChatCalc
Keeps the tape of committed calculations for the running session
"""
import threading
from collections import deque
from datetime import datetime

import config


class HistoryManager:
    def __init__(self, max_items=config.MAX_HISTORY_ITEMS):
        self._calculations = deque(maxlen=max_items)
        self._lock = threading.Lock()

    def add_calculation(self, expression, result):
        """Add a calculation to history"""
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        with self._lock:
            self._calculations.append((expression, result, timestamp))

    def get_calculation_history(self, limit=50):
        """Get calculation history, newest first"""
        with self._lock:
            newest_first = list(reversed(self._calculations))
        return newest_first[:max(limit, 0)]

    def clear_calculation_history(self):
        """Clear all calculation history"""
        with self._lock:
            self._calculations.clear()

    def format_calculation_history(self):
        """Format calculation history for display"""
        history = self.get_calculation_history()
        formatted = []

        for expr, result, timestamp in history:
            formatted.append(f"{timestamp}: {expr} = {result}")

        return formatted

    def __len__(self):
        return len(self._calculations)
