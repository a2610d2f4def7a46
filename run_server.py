#!/usr/bin/env python3
"""
SmartCall Server launcher
Runs the FastAPI app (smart chat + MCP tool endpoints) under uvicorn
"""
import os
import sys

# Fix encoding issues on servers with ASCII locale
os.environ.setdefault('PYTHONIOENCODING', 'utf-8')
os.environ.setdefault('LANG', 'en_US.UTF-8')
os.environ.setdefault('LC_ALL', 'en_US.UTF-8')

import logging
import uvicorn
from smartcall.config import settings

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def main():
    logger.info("Starting SmartCall server...")
    logger.info(f"Python {sys.version}, encoding={sys.getdefaultencoding()}")
    logger.info(f"Model: {settings.model} via {settings.llm_provider}")
    logger.info(f"HTTP server will run on http://{settings.host}:{settings.port}")
    try:
        uvicorn.run(
            "smartcall.main:app",
            host=settings.host,
            port=settings.port,
            log_level="info",
        )
    except Exception as e:
        logger.error(f"HTTP server failed: {e}")
        raise


if __name__ == "__main__":
    main()
