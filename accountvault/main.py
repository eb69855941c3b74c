"""
Main entry point for the FileShare Account Vault login window.
"""

import os
import sys
import signal
import logging
from PyQt5.QtWidgets import QApplication

from .ui import LoginDialog
from . import config
from . import vault_manager

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    level_name = os.environ.get(config.LOG_LEVEL_ENV, config.LOG_LEVEL_DEFAULT).upper()
    level = getattr(logging, level_name, None)
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(level=level, format=config.LOG_FORMAT)


def main() -> int:
    """Main entry point."""
    configure_logging()

    app = QApplication(sys.argv)
    app.setApplicationName(config.APP_NAME)

    # Handle Ctrl+C gracefully
    signal.signal(signal.SIGINT, signal.SIG_DFL)

    vault = vault_manager.open_vault(upgrade_legacy=True)

    dialog = LoginDialog(vault.store)
    dialog.login_successful.connect(lambda email, _password: logger.info("Login accepted"))
    return 0 if dialog.exec_() == LoginDialog.Accepted else 1


if __name__ == "__main__":
    sys.exit(main())
