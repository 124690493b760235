"""
ASGI entrypoint: expose `app` pour les process managers.

- En production: `uvicorn printstream.asgi:app` (ou gunicorn -k uvicorn.workers.UvicornWorker).
- Toute la configuration FastAPI est centralisée dans printstream.app_setup.factory.
"""

from printstream.app import app

if __name__ == "__main__":
    import os
    import uvicorn
    uvicorn.run(
        "printstream.asgi:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "8000")),
        reload=True,
    )
