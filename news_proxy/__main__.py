from __future__ import annotations

import uvicorn

from news_proxy.config import load_settings


def main() -> None:
    settings = load_settings()
    uvicorn.run("news_proxy.api.app:app", host=settings.server.host, port=settings.server.port)


if __name__ == "__main__":
    main()
