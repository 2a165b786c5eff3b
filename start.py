#!/usr/bin/env python3
"""
Startup script: checks the database, then starts the server
"""
import os

import uvicorn

from core.logging import logger
from db import test_connection


def start_server():
    """Start the FastAPI server"""
    port = int(os.getenv("PORT", 10000))
    logger.info(f"Starting FastAPI server on port {port}...")
    uvicorn.run("main:app", host="0.0.0.0", port=port)


if __name__ == "__main__":
    test_connection()
    start_server()
