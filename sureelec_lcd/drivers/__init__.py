"""
Asynchronous drivers built on :class:`~sureelec_lcd.session.DisplaySession`.
"""

from .base import BaseDisplayDriver
from .lcd import SureElecLCDDriver

__all__ = ["BaseDisplayDriver", "SureElecLCDDriver"]
