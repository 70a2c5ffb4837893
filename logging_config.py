import logging
import os
from logging.handlers import TimedRotatingFileHandler

def configurar_logging():
    nivel = os.getenv("LOG_LEVEL", "INFO").upper()
    diretorio = os.getenv("LOG_DIR", "logs")

    logging.basicConfig(
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        level=getattr(logging, nivel, logging.INFO)
    )

    os.makedirs(diretorio, exist_ok=True)
    file_handler = TimedRotatingFileHandler(
        os.path.join(diretorio, "receitas.log"), when="midnight", backupCount=7, encoding="utf-8"
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s"))

    logging.getLogger().addHandler(file_handler)
