import uvicorn

from app.configs.settings import settings
from app.configs.setup import create_app

app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "app.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.APP_ENV == "dev",
    )
