"""
Main application entry point for the image quiz backend.

Usage:
    - Direct: python -m quizbackend.main
    - ASGI server: uvicorn quizbackend.main:app
"""

import uvicorn

from quizbackend import create_app
from quizbackend.config import settings

app = create_app(settings)


if __name__ == "__main__":
    uvicorn.run("quizbackend.main:app", host="0.0.0.0", port=8000)
