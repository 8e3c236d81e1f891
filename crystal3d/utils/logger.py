# crystal3d/utils/logger.py
# ---------------------------------------------------------------
# Общий логгер пакета.  Все компоненты пишут через него с тегом
# вида "[ObjReader]" в начале сообщения.
# ---------------------------------------------------------------

import logging


def init_logger():
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    return logging.getLogger("Crystal3D")


logger = init_logger()
