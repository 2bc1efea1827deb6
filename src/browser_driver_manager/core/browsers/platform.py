import logging
import platform as host_platform
from typing import Optional

from webdriver_manager.core.os_manager import OperationSystemManager, OSType

from .constants import LINUX64, MAC_ARM64, MAC_X64, WIN32, WIN64

logger = logging.getLogger(__name__)

_ARM_MACHINES = ("arm64", "aarch64")


def detect_browser_platform(os_manager: Optional[OperationSystemManager] = None) -> Optional[str]:
    """Map the host OS/architecture onto a Chrome for Testing platform tag.

    Returns None where no Chrome for Testing build is published (e.g. Linux on ARM).
    """
    os_manager = os_manager or OperationSystemManager()
    os_name = os_manager.get_os_name()
    machine = host_platform.machine().lower()
    is_arm = machine in _ARM_MACHINES

    if os_name == OSType.MAC:
        return MAC_ARM64 if is_arm else MAC_X64
    if os_name == OSType.WIN:
        return WIN64 if os_manager.get_os_architecture() == 64 else WIN32
    if os_name == OSType.LINUX:
        if is_arm:
            logger.warning(f"No Chrome for Testing builds are published for linux/{machine}.")
            return None
        return LINUX64 if os_manager.get_os_architecture() == 64 else None
    logger.warning(f"Unrecognized operating system: {os_name}")
    return None
