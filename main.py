import os

import uvicorn

from pyq.app import app


if __name__ == "__main__":
    uvicorn.run(
        app,
        host=os.environ.get("PYQ_HOST", "127.0.0.1"),
        port=int(os.environ.get("PYQ_PORT", "8000")),
    )
