"""
Login dialog for the FileShare desktop client.

Shows saved accounts, fills the form from a selection and remembers
credentials through the AccountStore.
"""

import logging
from typing import Optional
from PyQt5.QtWidgets import (
    QDialog, QVBoxLayout, QHBoxLayout, QLabel, QLineEdit, QPushButton,
    QListWidget, QListWidgetItem, QCheckBox, QMessageBox
)
from PyQt5.QtCore import Qt, pyqtSignal

from .storage import AccountStore
from . import config

logger = logging.getLogger(__name__)

EMAIL_ROLE = Qt.UserRole


class LoginDialog(QDialog):
    """Login dialog backed by the saved-account store."""
    login_successful = pyqtSignal(str, str)

    def __init__(self, store: AccountStore, parent=None):
        super().__init__(parent)
        self.store = store
        self.init_ui()
        self.load_saved_accounts()

    def init_ui(self):
        """Initialize the user interface."""
        self.setWindowTitle(f"{config.APP_TITLE_PREFIX} - Login")
        self.setMinimumSize(config.LOGIN_WINDOW_MIN_WIDTH, config.LOGIN_WINDOW_MIN_HEIGHT)
        self.setModal(True)

        layout = QVBoxLayout()

        layout.addWidget(QLabel("Saved accounts:"))
        self.accounts_list = QListWidget()
        self.accounts_list.currentItemChanged.connect(self.on_account_selected)
        layout.addWidget(self.accounts_list)

        layout.addWidget(QLabel("Email:"))
        self.email_input = QLineEdit()
        layout.addWidget(self.email_input)

        layout.addWidget(QLabel("Password:"))
        self.password_input = QLineEdit()
        self.password_input.setEchoMode(QLineEdit.Password)
        self.password_input.returnPressed.connect(self.login)
        layout.addWidget(self.password_input)

        self.remember_checkbox = QCheckBox("Remember this account")
        layout.addWidget(self.remember_checkbox)

        button_layout = QHBoxLayout()
        self.forget_button = QPushButton("Forget")
        self.forget_button.clicked.connect(self.forget_selected)
        self.forget_button.setEnabled(False)
        button_layout.addWidget(self.forget_button)

        self.login_button = QPushButton("Login")
        self.login_button.clicked.connect(self.login)
        button_layout.addWidget(self.login_button)
        layout.addLayout(button_layout)

        self.status_label = QLabel("")
        self.status_label.setStyleSheet("color: red")
        layout.addWidget(self.status_label)

        self.setLayout(layout)
        self.email_input.setFocus()

    def load_saved_accounts(self):
        """Fill the list from the store, most recently used first."""
        self.accounts_list.blockSignals(True)
        self.accounts_list.clear()
        for account in self.store.list():
            item = QListWidgetItem(account.account_name)
            item.setData(EMAIL_ROLE, account.email)
            self.accounts_list.addItem(item)
        self.accounts_list.setCurrentRow(-1)
        self.accounts_list.blockSignals(False)
        self.forget_button.setEnabled(False)

    def selected_email(self) -> Optional[str]:
        item = self.accounts_list.currentItem()
        return item.data(EMAIL_ROLE) if item is not None else None

    def on_account_selected(self, current, previous=None):
        if current is None:
            self.forget_button.setEnabled(False)
            return
        account = self.store.get(current.data(EMAIL_ROLE))
        if account is None:
            return
        self.email_input.setText(account.email)
        self.password_input.setText(account.password)
        self.remember_checkbox.setChecked(False)
        self.forget_button.setEnabled(True)

    def forget_selected(self):
        email = self.selected_email()
        if email is None:
            return
        self.store.delete(email)
        self.load_saved_accounts()
        self.email_input.clear()
        self.password_input.clear()

    def login(self):
        """Validate the form, update the store and report the credentials."""
        email = self.email_input.text().strip()
        password = self.password_input.text()
        if not email or not password:
            self.status_label.setText("Please enter both email and password")
            return

        if self.remember_checkbox.isChecked():
            self.store.save(email, password)
        else:
            self.store.touch(email)

        if not self.store.in_sync:
            QMessageBox.warning(self, "Saved Accounts",
                "Your saved accounts could not be written to disk. Changes will be lost on exit.")

        self.login_successful.emit(email, password)
        self.accept()
