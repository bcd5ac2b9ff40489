#!/usr/bin/env python3
"""Run the photo-trail web server straight from a source checkout."""

import logging
import sys
from pathlib import Path

# Make the src/ layout importable without installing
src_dir = Path(__file__).parent / "src"
sys.path.insert(0, str(src_dir))

import uvicorn

from photo_trail.web.api import app, config

if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    print("Starting photo-trail web server from source...")
    print("API documentation: http://localhost:8000/docs")
    print(f"Database: {config.db_path}")
    print("\nPress Ctrl+C to stop the server")

    uvicorn.run(app, host="127.0.0.1", port=8000, log_level="info")
