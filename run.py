#!/usr/bin/env python3
"""
Run script for the Sentient meditation backend
"""
import uvicorn

from sentient.config.settings import settings
from sentient.main import app

if __name__ == "__main__":
    uvicorn.run(app, host=settings.host, port=settings.port, reload=settings.debug)
