#!/usr/bin/env python3
"""
Start script for uvicorn
"""
import sys
import os

# Make the investment_tracker package importable when run from anywhere
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

import uvicorn

if __name__ == "__main__":
    uvicorn.run(
        "investment_tracker.main:app",
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8000")),
        reload=False,
        log_level="info"
    )
