#!/usr/bin/env python3
"""
Data Routes - serves the CSV export as plain text
"""

import logging
from pathlib import Path

from fastapi import APIRouter, HTTPException
from fastapi.responses import Response

logger = logging.getLogger("tiles.relay")


def create_data_routes(csv_path: Path) -> APIRouter:
    router = APIRouter()

    @router.get("/data")
    def get_data():
        """Current CSV contents; never cached, consumers re-fetch on every token."""
        try:
            content = csv_path.read_bytes()
        except FileNotFoundError:
            logger.warning(f"CSV requested but {csv_path} does not exist")
            raise HTTPException(status_code=404, detail="csv not found")

        return Response(
            content=content,
            media_type="text/csv; charset=utf-8",
            headers={"Cache-Control": "no-store"},
        )

    return router
