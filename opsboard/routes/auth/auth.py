from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import jwt, JWTError

from opsboard.config import JWT_SECRET, JWT_ALGORITHM
from opsboard.db import USERS_COLLECTION, get_collection

# Tokens are issued by the dashboard's sign-in service
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")


async def get_current_user(token: str = Depends(oauth2_scheme)):
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
        if payload.get("type") != "access":
            raise credentials_exception
        user_id: Optional[str] = payload.get("sub")
        if user_id is None:
            raise credentials_exception
    except JWTError:
        raise credentials_exception

    users = get_collection(USERS_COLLECTION)
    user_doc = await users.find_one({"_id": user_id})
    if not user_doc:
        raise credentials_exception

    return {"id": user_doc["_id"], "email": user_doc.get("email"), "role": user_doc.get("role")}
