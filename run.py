from cli import cli
from config.configs import configs
from utils.logger_utils import configure_logging, get_logger

configure_logging(log_level=configs.app.log_level)
logger = get_logger("Run Entry Point")

if __name__ == "__main__":
    cli()
