import os
from urllib.parse import quote_plus

# Load .env from project root so local development credentials are picked up
from dotenv import load_dotenv

load_dotenv()


def build_mongo_uri(env=None):
    """Return the MongoDB connection string for the current environment.

    An explicit ``MONGO_URI`` wins. Otherwise an Atlas SRV URI is assembled
    from ``DB_USER`` and ``SECRET_KEY``; without credentials we fall back to a
    local server.
    """
    env = os.environ if env is None else env
    uri = env.get("MONGO_URI")
    if uri:
        return uri

    user = env.get("DB_USER")
    secret = env.get("SECRET_KEY")
    if user and secret:
        host = env.get("MONGO_CLUSTER_HOST", "cluster0.snunz.mongodb.net")
        return (
            f"mongodb+srv://{quote_plus(user)}:{quote_plus(secret)}@{host}/"
            "?retryWrites=true&w=majority&appName=Cluster0"
        )
    return "mongodb://localhost:27017/?directConnection=true"


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    MONGO_URI = build_mongo_uri()
    MONGO_DB_NAME = os.environ.get("MONGO_DB_NAME", "jobPortal")
    TASKS_COLLECTION = os.environ.get("TASKS_COLLECTION", "Tasks")
    MONGO_TIMEOUT_MS = int(os.environ.get("MONGO_TIMEOUT_MS", "5000"))

    CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "*")
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    ENV = os.environ.get("FLASK_ENV", "development")
    DEBUG = os.environ.get("FLASK_DEBUG", "1") == "1"
