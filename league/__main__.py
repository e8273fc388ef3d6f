"""Entry point: ``python -m league`` serves the API with uvicorn."""
import logging

import uvicorn

from league.config import settings

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    uvicorn.run("league.main:app", host=settings.HOST, port=settings.PORT)
