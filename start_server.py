#!/usr/bin/env python3
"""Startup script that reads PORT from environment and starts uvicorn"""
import os
import logging

logger = logging.getLogger("start_server")


def get_port():
    """Get PORT from environment variable, default to 8000"""
    port = os.getenv("PORT", "8000")

    # Extract only numbers from PORT
    port_num = ''.join(filter(str.isdigit, str(port)))

    if not port_num:
        logger.warning(f"PORT '{port}' is invalid, using default 8000")
        port_num = "8000"

    return int(port_num)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    port = get_port()
    logger.info(f"Starting uvicorn on port {port}...")

    # Replace the current process with uvicorn
    os.execvp("uvicorn", [
        "uvicorn",
        "main:app",
        "--host", "0.0.0.0",
        "--port", str(port)
    ])
