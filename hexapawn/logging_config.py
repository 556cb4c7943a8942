import logging

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)-8s - %(message)s'


def setup_logging(level="INFO", log_file=None):
    """Configure the root logger once: to log_file if given, else stderr."""
    handlers = [logging.FileHandler(log_file, mode='a')] if log_file else [logging.StreamHandler()]
    logging.basicConfig(level=getattr(logging, str(level).upper(), logging.INFO),
                        format=LOG_FORMAT,
                        handlers=handlers,
                        force=True)
