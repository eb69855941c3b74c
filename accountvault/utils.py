import platform
import os
import stat
import logging

from . import config

logger = logging.getLogger(__name__)

if platform.system() == "Windows":
    try:
        import win32security
        import win32api
        import win32con
        import win32file
        WINDOWS_SECURITY_AVAILABLE = True
    except ImportError:
        logger.warning("pywin32 not fully installed, cannot hide files or set Windows file permissions.")
        WINDOWS_SECURITY_AVAILABLE = False
else:
    WINDOWS_SECURITY_AVAILABLE = False


def get_config_dir() -> str:
    """
    Return the per-application configuration directory.

    ACCOUNTVAULT_HOME wins when set. Otherwise %APPDATA% on Windows and the
    XDG config home everywhere else. The directory is not created here.
    """
    override = os.environ.get(config.CONFIG_DIR_ENV)
    if override:
        return os.path.abspath(os.path.expanduser(override))

    if platform.system() == "Windows":
        base = os.environ.get("APPDATA") or os.path.join(os.path.expanduser("~"), "AppData", "Roaming")
    else:
        base = os.environ.get("XDG_CONFIG_HOME") or os.path.join(os.path.expanduser("~"), ".config")
    return os.path.join(base, config.CONFIG_DIR_NAME)


def atomic_write(filepath: str, data: bytes) -> None:
    """
    Write data to filepath through a temporary file and os.replace.

    Parent directories are created as needed. Raises OSError on failure, after
    removing the temporary file.
    """
    directory = os.path.dirname(filepath)
    if directory:
        os.makedirs(directory, exist_ok=True)

    tmp_path = filepath + config.TMP_SUFFIX
    try:
        # a leftover temp file would keep its old, possibly wider, mode
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        flags = os.O_WRONLY | os.O_CREAT | os.O_TRUNC | getattr(os, 'O_BINARY', 0)
        fd = os.open(tmp_path, flags, stat.S_IRUSR | stat.S_IWUSR)  # 600 from creation
        with os.fdopen(fd, 'wb') as f:
            f.write(data)
        # os.replace also overwrites hidden files on Windows, plain open('wb') does not
        os.replace(tmp_path, filepath)
    except OSError:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise


def hide_file(filepath: str) -> bool:
    """
    Best-effort mark filepath as hidden.

    On Windows this sets FILE_ATTRIBUTE_HIDDEN. On other platforms a file is
    hidden by its dot-prefixed name, so this only reports whether it has one.
    Never raises.
    """
    if platform.system() != "Windows":
        return os.path.basename(filepath).startswith(".")

    if not WINDOWS_SECURITY_AVAILABLE:
        logger.debug(f"Skipping hidden attribute for {filepath}: pywin32 not available.")
        return False

    try:
        attributes = win32api.GetFileAttributes(filepath)
        win32api.SetFileAttributes(filepath, attributes | win32con.FILE_ATTRIBUTE_HIDDEN)
        return True
    except (win32api.error, OSError) as e:
        logger.debug(f"Could not mark {filepath} as hidden: {e}")
        return False


def restrict_permissions(filepath: str) -> bool:
    """Set file to be readable/writable by owner only. Never raises."""
    if platform.system() == "Windows":
        return _set_windows_file_permissions(filepath)

    try:
        os.chmod(filepath, stat.S_IRUSR | stat.S_IWUSR)  # 600
        return True
    except OSError as e:
        logger.warning(f"Failed to restrict permissions for {filepath}: {e}")
        return False


def _set_windows_file_permissions(filepath: str) -> bool:
    """
    Grant the current user read/write on filepath and drop inherited access
    for everyone else.
    """
    if not WINDOWS_SECURITY_AVAILABLE:
        logger.debug(f"Skipping Windows file permission setting for {filepath}: pywin32 not available.")
        return False

    try:
        user_sid, _, _ = win32security.LookupAccountName(None, win32api.GetUserName())

        dacl = win32security.ACL()
        dacl.AddAccessAllowedAce(
            win32security.ACL_REVISION,
            win32con.GENERIC_READ | win32con.GENERIC_WRITE,
            user_sid
        )

        handle = win32file.CreateFile(
            filepath,
            win32con.WRITE_DAC,
            win32file.FILE_SHARE_READ | win32file.FILE_SHARE_WRITE | win32file.FILE_SHARE_DELETE,
            None,
            win32con.OPEN_EXISTING,
            win32con.FILE_ATTRIBUTE_NORMAL,
            None
        )
        try:
            win32security.SetSecurityInfo(
                handle,
                win32security.SE_FILE_OBJECT,
                win32security.DACL_SECURITY_INFORMATION | win32security.PROTECTED_DACL_SECURITY_INFORMATION,
                None,
                None,
                dacl,
                None
            )
        finally:
            win32file.CloseHandle(handle)
    except (win32api.error, OSError) as e:
        logger.warning(f"Failed to set Windows file permissions for {filepath}: {e}")
        return False
    return True
