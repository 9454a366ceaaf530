"""
ChatCalc Calculator
Main application entry point
"""
import atexit
import logging
import os
import socket
import subprocess
import sys
import tkinter as tk

import config
from gui import ChatCalcGUI
from logging_config import setup_logging

logger = logging.getLogger("chatcalc")

# Global variable to track API process
api_process = None


def get_local_ip():
    try:
        s = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        # doesn't even have to be reachable
        s.connect(('10.255.255.255', 1))
        ip = s.getsockname()[0]
        s.close()
    except OSError:
        ip = '127.0.0.1'
    return ip


def start_api_server():
    """Start the Flask API server in a separate process"""
    global api_process
    script_dir = os.path.dirname(os.path.abspath(__file__))
    api_path = os.path.join(script_dir, 'api.py')

    try:
        api_process = subprocess.Popen(
            [sys.executable, api_path],
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            creationflags=subprocess.CREATE_NEW_CONSOLE if sys.platform == 'win32' else 0
        )
    except OSError:
        logger.exception("Failed to start API server")
        return

    ip = get_local_ip()
    logger.info("API server started (PID: %s)", api_process.pid)
    print("="*60)
    print("CHATCALC WEB API IS LIVE")
    print(f"Access on this PC:    http://localhost:{config.WEB_PORT}")
    print(f"Access on your Phone: http://{ip}:{config.WEB_PORT}")
    print("="*60)


def cleanup_api_server():
    """Terminate the API server when the main application exits"""
    global api_process
    if api_process is None:
        return
    try:
        api_process.terminate()
        api_process.wait(timeout=5)
        logger.info("API server stopped")
    except subprocess.TimeoutExpired:
        logger.warning("API server did not stop in time, killing it")
        api_process.kill()
    finally:
        api_process = None


def main():
    setup_logging()

    # Start the API server
    start_api_server()

    # Register cleanup function to run on exit
    atexit.register(cleanup_api_server)

    # Start the GUI
    root = tk.Tk()
    ChatCalcGUI(root)
    root.mainloop()

    # Cleanup when GUI closes
    cleanup_api_server()


if __name__ == "__main__":
    main()
