from __future__ import annotations

from fastapi import HTTPException, status


def http_error_from(e: ValueError) -> HTTPException:
    """Erro de serviço -> HTTP: "not found" vira 404, o resto 400."""
    msg = str(e)
    if "not found" in msg.lower():
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=msg)
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=msg)
