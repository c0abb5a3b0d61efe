"""
ASGI entry point.

Run with:
    uvicorn asgi:app --reload
or:
    python asgi.py   (listens on PORT, default 3000)
"""

import uvicorn

from app import create_app

app = create_app()

if __name__ == "__main__":
    uvicorn.run("asgi:app", host="0.0.0.0", port=app.state.settings.port)
