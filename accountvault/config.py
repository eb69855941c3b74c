"""
Configuration constants for the Account Vault.
"""

# Application Metadata
APP_VERSION = "1.0.0"  # Use: Current version of the application. Type: str. Range: Semantic versioning string (e.g., "1.0.0")
APP_NAME = "FileShare Account Vault"  # Use: Full name of the application. Type: str. Range: Any valid string.
APP_TITLE_PREFIX = f"{APP_NAME} v{APP_VERSION}"  # Use: Prefix for window titles, combining name and version. Type: str (f-string). Range: Derived from APP_NAME and APP_VERSION.

# Security Settings
KEY_SIZE = 32  # Use: Size of the master key in bytes. Corresponds to AES-256. Type: int. Range: 32 only; a key file of any other length is treated as corrupted.
IV_SIZE = 16  # Use: Size of the CBC initialization vector prepended to every ciphertext. Type: int. Range: 16 (one AES block).
BLOCK_SIZE_BITS = 128  # Use: Block size handed to the PKCS7 padder/unpadder. Type: int. Range: 128 (AES block size in bits).
TEXT_ENCODING = "utf-8"  # Use: Encoding applied to plaintext before encryption and after decryption. Type: str. Range: "utf-8".

# File and Directory Names
CONFIG_DIR_NAME = "MegaDesktopClient"  # Use: Name of the per-application directory holding the key and accounts files. Type: str. Range: Any valid directory name.
CONFIG_DIR_ENV = "ACCOUNTVAULT_HOME"  # Use: Environment variable that overrides the configuration directory. Type: str. Range: Any environment variable name.
KEY_FILE = ".master.key"  # Use: Filename of the raw 32-byte master key. Dot-prefixed so it is hidden on POSIX listings. Type: str. Range: Any valid filename.
ACCOUNTS_FILE = "accounts.json"  # Use: Filename of the serialized account records. Type: str. Range: Any valid filename.
CORRUPT_SUFFIX = ".corrupt"  # Use: Suffix of the copy kept when the accounts file cannot be parsed. Type: str. Range: Any filename suffix.
TMP_SUFFIX = ".tmp"  # Use: Suffix of the temporary file written before an atomic replace. Type: str. Range: Any filename suffix.

# Account Store Settings
ACCOUNT_NAME_PREFIX = "login_"  # Use: Prefix of the sequential default display name given to new accounts. Type: str. Range: Any string.
JSON_INDENT = 2  # Use: Indentation of the human-readable accounts file. Type: int. Range: Non-negative integer.

# Logging Settings
LOG_LEVEL_ENV = "ACCOUNTVAULT_LOG_LEVEL"  # Use: Environment variable that overrides the log level. Type: str. Range: Any environment variable name.
LOG_LEVEL_DEFAULT = "INFO"  # Use: Default log level name for the entry point. Type: str. Range: "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL".
LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"  # Use: Format string for the root log handler. Type: str. Range: Any logging format string.

# UI Settings
LOGIN_WINDOW_MIN_WIDTH = 420  # Use: Minimum width of the login dialog in pixels. Type: int. Range: Positive integer.
LOGIN_WINDOW_MIN_HEIGHT = 320  # Use: Minimum height of the login dialog in pixels. Type: int. Range: Positive integer.
