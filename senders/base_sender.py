from abc import ABC, abstractmethod
from typing import Optional


class BaseSender(ABC):
    @abstractmethod
    async def send(self,
             from_email: str,
             to_email: str,
             subject: str,
             html_body: str,
             text_body: Optional[str] = None,
             from_name: Optional[str] = None) -> bool:
        """Sends one message to one recipient. Returns False on a delivery failure."""
