import os

from dotenv import load_dotenv

load_dotenv()

HOST = os.environ.get("FLOODSCENE_HOST", "127.0.0.1")
PORT = int(os.environ.get("FLOODSCENE_PORT", "8000"))

CORS_ORIGINS = [
    origin.strip()
    for origin in os.environ.get(
        "FLOODSCENE_CORS_ORIGINS",
        "http://localhost:5173,http://127.0.0.1:5173",
    ).split(",")
    if origin.strip()
]

# Set FLOODSCENE_OFFLINE=1 to start the scene without any network fetches
OFFLINE = os.environ.get("FLOODSCENE_OFFLINE", "").strip() in ("1", "true", "yes")
