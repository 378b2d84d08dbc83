"""Flask entrypoint.

The application factory lives in `siscont.create_app`. Keeping this file as a
thin wrapper lets Flask CLI commands find the app:

  flask --app app db upgrade
  flask --app app siscont create-admin --username admin
"""

from werkzeug.middleware.proxy_fix import ProxyFix

from siscont import create_app as _create_app


def create_app():
    app = _create_app()

    # Useful behind a reverse proxy (Nginx/Traefik) + TLS termination.
    app.wsgi_app = ProxyFix(app.wsgi_app, x_proto=1, x_host=1)
    app.config.setdefault("PREFERRED_URL_SCHEME", "https")
    return app


# Expose an `app` variable for servers that don't support factories.
app = create_app()
