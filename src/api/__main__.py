"""Run the API with uvicorn: ``python -m src.api``."""

import uvicorn

from src.config.settings import get_settings

if __name__ == "__main__":
    uvicorn.run("src.api.main:app", host="0.0.0.0", port=get_settings().port)
