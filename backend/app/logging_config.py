import logging
import logging.handlers
import os
import sys

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(name)s - %(message)s'


def setup_logging(settings) -> None:
    """
    设置应用日志。
    同时输出到控制台和滚动文件，重复调用不会叠加 handler。
    """
    os.makedirs(settings.LOG_DIR, exist_ok=True)
    formatter = logging.Formatter(LOG_FORMAT)

    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)
        handler.close()

    logging.root.setLevel(settings.LOG_LEVEL.upper())

    file_handler = logging.handlers.RotatingFileHandler(
        os.path.join(settings.LOG_DIR, "app.log"),
        maxBytes=10 * 1024 * 1024,  # 10 MB
        backupCount=5,
        encoding='utf-8'
    )
    file_handler.setFormatter(formatter)
    logging.root.addHandler(file_handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logging.root.addHandler(console_handler)

    logging.captureWarnings(True)
