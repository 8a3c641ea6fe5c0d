# quotes_admin/core/logging_config.py
"""
Configuração de logging da aplicação.

Cada módulo usa seu próprio logger (`logging.getLogger(__name__)`); todos
ficam abaixo do logger raiz do pacote, configurado uma única vez na subida
da API.
"""

import logging
from typing import Union

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

ROOT_LOGGER_NAME = "quotes_admin"


def setup_logging(level: Union[int, str] = logging.INFO) -> logging.Logger:
    """
    Configura o logger raiz do pacote com saída no console.

    Pode ser chamado mais de uma vez (reload do uvicorn, testes): os handlers
    antigos são removidos antes de adicionar o novo.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level)

    while logger.handlers:
        logger.removeHandler(logger.handlers[0])

    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    logger.addHandler(handler)

    return logger
