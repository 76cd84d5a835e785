from pydantic import BaseModel
from typing import List, Optional


class NavigationResponse(BaseModel):
    """Backend sections the current user may see."""
    role: Optional[str] = None
    sections: List[str]
    landing_page: Optional[str] = None
