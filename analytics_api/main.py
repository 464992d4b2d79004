import uvicorn

from analytics_api.core.app_factory import create_app
from analytics_api.core.config import settings

app = create_app()


def run() -> None:
    """Console entry point: serve the app on the configured port."""
    uvicorn.run(app, host="0.0.0.0", port=settings.app.port)


if __name__ == "__main__":
    run()
