from fastapi import HTTPException
from typing import Any

def ok(data: Any = None, **extra):
    return {"ok": True, "data": data, **extra}

def err(message: str, code: str = "bad_request", status: int = 400):
    # always raises, so routes can `return err(...)` or just call it
    raise HTTPException(status_code=status, detail={"error": {"code": code, "message": message}})
