#!/usr/bin/env python
"""Script to run the taskhub API server."""
import uvicorn

if __name__ == "__main__":
    uvicorn.run(
        "taskhub.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True
    )
