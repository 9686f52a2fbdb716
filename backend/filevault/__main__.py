# backend/filevault/__main__.py
"""Run the API with uvicorn: ``python -m filevault``."""

import uvicorn

from . import config

if __name__ == "__main__":
    uvicorn.run("filevault.main:app", host=config.HOST, port=config.PORT)
