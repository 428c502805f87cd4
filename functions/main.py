"""
Serve the feedback API with uvicorn.
"""

import uvicorn

from feedback_server.config import get_settings

if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run(
        "feedback_server.app:app",
        host=settings.host,
        port=settings.port,
    )
