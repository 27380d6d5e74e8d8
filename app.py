import os

from taskboard.app import create_app

# Expose a module-level `app` for WSGI servers (gunicorn expects `app:app`).
# No database connection is made until the first request needs one.
app = create_app()


if __name__ == "__main__":
    # Local development only: run the built-in server.
    port = int(os.environ.get("PORT", 5000))
    app.run(host=os.environ.get("HOST", "0.0.0.0"), port=port, debug=app.config["DEBUG"])
