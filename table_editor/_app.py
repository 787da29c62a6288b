from fastapi import FastAPI

from ._config import config


app = FastAPI(
    title="table-editor",
    description="Staged editing sessions over the table rows API",
    debug=config.ENVIRONMENT == "local",
)
