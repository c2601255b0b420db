"""Web Server Gateway Interface entry-point (gunicorn session_gateway.wsgi:app)."""

from session_gateway.flask_app import create_app

app = create_app()


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=5000, debug=True)
