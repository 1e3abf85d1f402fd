import os

from dotenv import load_dotenv
from fastapi.openapi.utils import get_openapi

# Load environment variables for development before settings are read
load_dotenv()  # This reads .env into os.environ

from banquet.core.config import load_settings  # noqa: E402
from banquet.gateway import create_gateway  # noqa: E402
from banquet.main import create_app  # noqa: E402

settings = load_settings()
app = create_app(settings)
gateway = create_gateway(settings)


def custom_openapi() -> dict:
    """Return OpenAPI schema with project metadata."""
    if app.openapi_schema:
        return app.openapi_schema
    app.openapi_schema = get_openapi(
        title="Banquet Marketplace API",
        version="1.0.0",
        description="Venue bookings, quotes, invoices and notifications for the banquet marketplace.",
        routes=app.routes,
    )
    return app.openapi_schema


app.openapi = custom_openapi

if __name__ == "__main__":
    import uvicorn

    target = "main:gateway" if os.getenv("RUN_GATEWAY", "0") == "1" else "main:app"
    uvicorn.run(
        target,
        host="0.0.0.0",
        port=int(os.getenv("PORT", "8000")),
        reload=True,
        timeout_keep_alive=int(os.getenv("UVICORN_KEEPALIVE", "65")),
    )
