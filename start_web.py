#!/usr/bin/env python3
"""Run the DepBump API with auto-reload for local development."""

import uvicorn

if __name__ == "__main__":
    print("DepBump API on http://localhost:8000 (POST /api/check, docs at /docs)")

    uvicorn.run(
        "apps.web.main:app",
        host="127.0.0.1",
        port=8000,
        reload=True,
        reload_dirs=["apps", "core"],
    )
