from __future__ import annotations

from typing import Annotated, Optional

from fastapi import Depends

from courseconnect.core.db.schemas.auth import User
from courseconnect.modules.auth import current_active_user, optional_user

CurrentUser = Annotated[User, Depends(current_active_user)]
# Guests can use the stateless endpoints; persistence is skipped for them
OptionalUser = Annotated[Optional[User], Depends(optional_user)]
