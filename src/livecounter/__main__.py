"""Run the LiveCounter server: ``python -m livecounter``."""

import uvicorn

from .config import get_config
from .log import configure_logging
from .web import create_app


def main():
    config = get_config()
    configure_logging(config.logging)
    app = create_app(config)

    print("\n" + "=" * 60)
    print(f"🔢 LiveCounter serving on http://{config.web.host}:{config.web.port}")
    print("=" * 60)

    uvicorn.run(app, host=config.web.host, port=config.web.port, log_level=config.logging.level.lower())


if __name__ == "__main__":
    main()
