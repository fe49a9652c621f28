"""Run the API with uvicorn: ``python -m tollgate``."""

import os

import uvicorn


def main() -> None:
    """Serve tollgate.main:app on HOST:PORT (default 0.0.0.0:8001)."""
    uvicorn.run(
        "tollgate.main:app",
        host=os.environ.get("HOST", "0.0.0.0"),
        port=int(os.environ.get("PORT", "8001")),
        proxy_headers=True,
    )


if __name__ == "__main__":
    main()
