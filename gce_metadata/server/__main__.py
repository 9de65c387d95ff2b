import uvicorn

from ..config import AppConfig
from .main import app

config = AppConfig()
uvicorn.run(app, host=config.bind_host, port=config.port)
