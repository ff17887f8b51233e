import logging
import logging.config
import os
import yaml
from pythonjsonlogger import jsonlogger


def setup_logging(
    default_path="logging.yaml",
    default_level=logging.INFO,
    env_key="LOG_CFG",
    verbose=False,
):
    """Setup logging configuration"""
    path = os.getenv(env_key, default_path)
    level = logging.DEBUG if verbose else default_level
    if os.path.exists(path):
        with open(path, "rt") as f:
            config = yaml.safe_load(f.read())
        logging.config.dictConfig(config)
        if verbose:
            logging.getLogger().setLevel(level)
    else:
        # Basic config with JSON formatter on stderr, keeping stdout for the console output

        log_handler = logging.StreamHandler()
        formatter = jsonlogger.JsonFormatter(
            "%(asctime)s %(name)s %(levelname)s %(message)s"
        )
        log_handler.setFormatter(formatter)

        logging.basicConfig(level=level, handlers=[log_handler], force=True)
        logging.debug("Using basic logging configuration with JSON output.")
