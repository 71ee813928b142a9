"""Backend entrypoint: starts uvicorn with host and port from env."""
import os
import uvicorn

from finsight.main import app


def main() -> None:
    host = os.environ.get("FINSIGHT_HOST", "127.0.0.1")
    port = int(os.environ.get("FINSIGHT_PORT", "8001"))
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    main()
