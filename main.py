from loguru import logger

from gemrelay.logging import setup_logger
from gemrelay.server import create_app
from gemrelay.settings import settings

setup_logger(settings)

app = create_app(settings)


@app.on_event("startup")
async def startup_event():
    logger.info(f"Gemini API server is running at http://{settings.HOST}:{settings.PORT}")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host=settings.HOST, port=settings.PORT)
