#!/usr/bin/env python3
"""
Startup script for the ProfRatings API server
Runs the FastAPI application with ReDoc documentation available at /redoc
"""

import sys
from pathlib import Path

import uvicorn

# Add src to path for imports
src_path = Path(__file__).parent / "src"
sys.path.insert(0, str(src_path))

from profratings.core.config import get_settings  # noqa: E402


def main() -> None:
    """Run the FastAPI server"""
    settings = get_settings()
    print(f"Starting {settings.app_name} API server ({settings.kv_backend} store)...")
    print(f"API documentation will be available at: http://localhost:{settings.api_port}/redoc")
    print(f"OpenAPI JSON schema available at: http://localhost:{settings.api_port}/openapi.json")

    uvicorn.run(
        "profratings.api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
